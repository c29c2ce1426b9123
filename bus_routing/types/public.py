import itertools as it, operator as op, functools as ft
from collections import namedtuple
import enum

from .. import utils as u


class DistanceUnits(enum.Enum):
	'Units that itinerary distances can be measured in.'
	meters = 'meters'
	millimeters = 'millimeters'
	centimeters = 'centimeters'
	kilometers = 'kilometers'
	acres = 'acres'
	miles = 'miles'
	nauticalmiles = 'nauticalmiles'
	inches = 'inches'
	yards = 'yards'
	feet = 'feet'
	radians = 'radians'
	degrees = 'degrees'
	hectares = 'hectares'

	@classmethod
	def get(cls, units):
		if isinstance(units, cls): return units
		try: return cls(str(units).lower())
		except ValueError:
			raise ValueError('Unknown distance units: {!r}'.format(units)) from None

class TransitType(enum.Enum):
	transit = 'transit'


### Snapshot data

Coordinates = namedtuple('Coordinates', 'lng lat')

def coords_tuple(coords):
	'Convert sequence of Coordinates, (lng, lat) pairs or {lng, lat} mappings to a tuple.'
	coords_list = list()
	for c in coords:
		if isinstance(c, dict): c = Coordinates(c['lng'], c['lat'])
		elif not isinstance(c, Coordinates): c = Coordinates(*c)
		coords_list.append(Coordinates(float(c.lng), float(c.lat)))
	return tuple(coords_list)


@u.attr_struct(frozen=True, hash=True)
class Label:
	'Multilingual text, english and burmese.'
	en = u.attr_init(None)
	mm = u.attr_init(None)

	@classmethod
	def from_value(cls, v):
		if isinstance(v, cls): return v
		if v is None: return cls()
		if isinstance(v, str): return cls(v)
		return cls(**v)

	def values(self): return list(filter(None, [self.en, self.mm]))
	def matches(self, regex): return any(regex.search(v) for v in self.values())
	def __str__(self): return self.en or self.mm or ''


@u.attr_struct(repr=False, eq=False)
class Stop:
	id = u.attr_init()
	name = u.attr_init(converter=Label.from_value)
	road = u.attr_init(converter=Label.from_value)
	township = u.attr_init(converter=Label.from_value)
	lat = u.attr_init(converter=float)
	lng = u.attr_init(converter=float)

	@property
	def coordinates(self): return Coordinates(self.lng, self.lat)

	@property
	def place(self):
		'Key for stop records that represent the same place, e.g. both sides of the road.'
		return self.name.en, self.road.en, self.township.en

	def __hash__(self): return hash(self.id)
	def __eq__(self, stop): return u.same_type_and_id(self, stop)
	def __repr__(self): return '<Stop {} [{}]>'.format(self.name, self.id)


@u.attr_struct(frozen=True)
class RouteInfo:
	'Route metadata without its stop and coordinate lists.'
	keys = 'route_id name color props'

@u.attr_struct(repr=False, eq=False)
class Route:
	route_id = u.attr_init()
	stops = u.attr_init(converter=tuple)
	coordinates = u.attr_init(converter=coords_tuple)
	name = u.attr_init(Label, converter=Label.from_value)
	color = u.attr_init(None)
	props = u.attr_init(dict)

	def info(self):
		return RouteInfo(self.route_id, self.name, self.color, dict(self.props))

	def trimmed(self, stop_ids, coordinates):
		'Return copy of the route with only specified stops/coordinates.'
		return u.attr.evolve(self, stops=stop_ids, coordinates=coordinates)

	def __hash__(self): return hash(self.route_id)
	def __eq__(self, route):
		return type(self) is type(route) and self.route_id == route.route_id
	def __repr__(self):
		return '<Route {} [stops={}]>'.format(self.route_id, len(self.stops))


@u.attr_struct
class Snapshot:
	'Stops and routes of the network, never modified by searches.'
	stops = u.attr_init(converter=tuple)
	routes = u.attr_init(converter=tuple)


### Search results

@u.attr_struct(frozen=True)
class TransitStep:
	type = u.attr_init()
	route = u.attr_init()
	distance = u.attr_init()


def label_dict(label): return u.attr.asdict(label)

def route_dict(route):
	info = route_info_dict(route)
	info.update( stops=list(route.stops),
		coordinates=list(c._asdict() for c in route.coordinates) )
	return info

def route_info_dict(route):
	info = dict(route.props)
	info.update(route_id=route.route_id, name=label_dict(route.name), color=route.color)
	return info


@u.attr_struct(repr=False, eq=False, frozen=True)
class Itinerary:
	'''One end-to-end journey of 1-3 legs.
		"routes" are copies of the routes with stops and coordinates trimmed to the
			travelled part, while "steps" have untrimmed route metadata and leg distance.'''
	id = u.attr_init()
	routes = u.attr_init(converter=tuple)
	steps = u.attr_init(converter=tuple)
	distance = u.attr_init()

	@classmethod
	def from_legs(cls, legs):
		'Build itinerary from (route, stops, coordinates, distance) legs.'
		routes, steps = list(), list()
		for leg in legs:
			routes.append(leg.route.trimmed(
				tuple(stop.id for stop in leg.stops), leg.coordinates ))
			steps.append(TransitStep(TransitType.transit, leg.route.info(), leg.distance))
		return cls(
			u.ids_joined(routes, key=op.attrgetter('route_id')),
			routes, steps, sum(map(op.attrgetter('distance'), steps)) )

	@property
	def stop_count(self): return sum(len(route.stops) for route in self.routes)

	def as_dict(self):
		return dict(
			id=self.id, distance=self.distance,
			routes=list(map(route_dict, self.routes)),
			transit_steps=list(
				dict( type=step.type.value, distance=step.distance,
					step=route_info_dict(step.route) ) for step in self.steps ) )

	def as_feature(self):
		'Return itinerary as a GeoJSON Feature mapping.'
		props = self.as_dict()
		for route in props['routes']: del route['coordinates']
		return dict( type='Feature', id=self.id, properties=props,
			geometry=dict( type='MultiLineString',
				coordinates=list(list(map(list, route.coordinates)) for route in self.routes) ) )

	def __len__(self): return len(self.steps)
	def __iter__(self): return iter(zip(self.routes, self.steps))
	def __hash__(self): return hash(self.id)
	def __eq__(self, itn): return u.same_type_and_id(self, itn)
	def __repr__(self):
		return '<Itinerary[ {} ] stops={} distance={:.3f}>'.format(
			self.id, self.stop_count, self.distance )

	def pretty_print(self, units=None, indent=0, **print_kws):
		p = lambda tpl,*a,**k: print(' '*indent + tpl.format(*a,**k), **print_kws)
		units = ' {}'.format(units.value) if units else ''
		p( 'Itinerary {} (legs: {}, stops: {}, distance: {:,.3f}{}):',
			self.id, len(self), self.stop_count, self.distance, units )
		for route, step in self:
			p('  {} [{}]: {}', step.type.value, route.route_id, route.name)
			p('    from: {}', route.stops[0])
			p('    to: {}', route.stops[-1])
			p('    stops: {}, distance: {:,.3f}{}', len(route.stops), step.distance, units)


itinerary_rank_key = lambda itn: (len(itn.steps), itn.stop_count)

def rank_itineraries(itineraries, count=None):
	'''Order itineraries by number of legs, then total number of stops.
		Ties keep the original (discovery) order, as sorted() is stable.'''
	itineraries = sorted(itineraries, key=itinerary_rank_key)
	return tuple(itineraries if count is None else itineraries[:count])


class ItinerarySet:
	'Immutable discovery-order set of itineraries, produced by one search.'

	def __init__(self, itineraries=()):
		self.items = tuple(itineraries)
		self.set_idx = dict((itn.id, itn) for itn in self.items)

	def ranked(self, count=None): return rank_itineraries(self.items, count)

	def as_feature_collection(self, count=None):
		return dict( type='FeatureCollection',
			features=list(itn.as_feature() for itn in self.ranked(count)) )

	def __getitem__(self, itn_id): return self.set_idx[itn_id]
	def __contains__(self, itn_id): return itn_id in self.set_idx
	def __len__(self): return len(self.items)
	def __iter__(self): return iter(self.items)
	def __repr__(self): return '<ItinerarySet {}>'.format(list(self.set_idx))

	def pretty_print(self, count=None, units=None, indent=0, **print_kws):
		itineraries = self.ranked(count)
		print(' '*indent + 'Itinerary set ({}):'.format(len(itineraries)), **print_kws)
		for itn in itineraries:
			print(**print_kws)
			itn.pretty_print(units=units, indent=indent+2, **print_kws)
