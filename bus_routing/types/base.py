### TransitRoutingEngine internal types - transfer index, search state

import itertools as it, operator as op, functools as ft
from collections import namedtuple
import enum

from . import public as tp
from .. import utils as u


@u.attr_struct(frozen=True)
class TransferPoint:
	'Stop id with all routes going through that stop, in snapshot route order.'
	stop = u.attr_init()
	routes = u.attr_init(converter=tuple)


def transfer_points(stops, routes):
	'Return {stop_id: TransferPoint} mapping for all stops, including unserved ones.'
	stop_routes = dict((stop.id, list()) for stop in stops)
	for route in routes:
		for stop_id in dict.fromkeys(route.stops): # loop routes pass some stops twice
			try: stop_routes[stop_id].append(route)
			except KeyError: pass
	return dict( (stop_id, TransferPoint(stop_id, stop_route_list))
		for stop_id, stop_route_list in stop_routes.items() )


class TransferIndex:
	'''Read-only indexes for one snapshot:
			transfer points, stops by id and place, route stop sequences.
		Shared between all searches on the same snapshot.'''

	def __init__(self, stops, routes):
		self.stops = dict((stop.id, stop) for stop in stops)
		self.routes = tuple(routes)
		self.points = transfer_points(stops, routes)
		self.places = dict()
		for stop in stops:
			if not any(stop.place): continue # unlabeled stops are only siblings to themselves
			self.places.setdefault(stop.place, list()).append(stop)
		self.places = dict((k, tuple(v)) for k, v in self.places.items())
		self._route_stops = dict(
			(route.route_id, tuple(self.stops[stop_id] for stop_id in route.stops))
			for route in self.routes )

	@classmethod
	def build(cls, snapshot): return cls(snapshot.stops, snapshot.routes)

	def stop(self, stop_id): return self.stops[stop_id]

	def siblings(self, stop):
		'All stops for the same place as specified one, including itself.'
		return self.places.get(stop.place, (stop,))

	def route_stops(self, route):
		'Sequence of Stops for route, in travel order.'
		return self._route_stops[route.route_id]

	def resolve(self, candidates):
		'''Return TransferPoint for first stop (in snapshot order)
				from candidates, preferring ones that have any routes going through them.
			None is returned if none of candidate stops are in the snapshot.'''
		candidate_ids = set(stop.id for stop in candidates)
		points = list( point for stop_id, point
			in self.points.items() if stop_id in candidate_ids )
		for point in points:
			if point.routes: return point
		return points[0] if points else None

	def __getitem__(self, stop_id): return self.points[stop_id]
	def __len__(self): return len(self.points)
	def __iter__(self): return iter(self.points.values())


Leg = namedtuple('Leg', 'route stops coordinates distance')


class SearchOutcome(enum.Enum):
	'''Result of TransitRoutingEngine.search() call.
		"not_configured" is returned when origin/destination stops were not set,
			as opposed to "not_found" when search was done, but found nothing.'''
	found = 'found'
	not_found = 'not_found'
	not_configured = 'not_configured'


class SearchState:
	'''Working set of a single search - visited route ids and itineraries found so far.
		Created anew for each search and turned into immutable ItinerarySet when done.'''

	def __init__(self, count):
		self.count, self.visited, self.itineraries = count, set(), dict()

	@property
	def full(self): return len(self.itineraries) >= self.count

	def visit(self, route): self.visited.add(route.route_id)
	def is_visited(self, route): return route.route_id in self.visited

	def add(self, itn):
		assert itn.id not in self.itineraries, itn.id
		self.itineraries[itn.id] = itn

	def finalize(self): return tp.ItinerarySet(self.itineraries.values())

	def __contains__(self, itn_id): return itn_id in self.itineraries
	def __len__(self): return len(self.itineraries)
