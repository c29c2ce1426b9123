import itertools as it, operator as op, functools as ft
from collections import ChainMap, OrderedDict
from collections.abc import Mapping
from pathlib import Path
import os, sys, types, re, math

import yaml # PyYAML module is required for tests

path_project = Path(__file__).parent.parent
sys.path.insert(1, str(path_project))
import bus_routing as br

verbose = os.environ.get('BR_DEBUG')
if verbose:
	br.u.logging.basicConfig(
		format='%(asctime)s :: %(name)s %(levelname)s :: %(message)s',
		datefmt='%Y-%m-%d %H:%M:%S', level=br.u.logging.DEBUG )



class dmap(ChainMap):

	maps = None

	def __init__(self, *maps, **map0):
		maps = list((v if not isinstance( v,
			(types.GeneratorType, list, tuple) ) else OrderedDict(v)) for v in maps)
		if map0 or not maps: maps = [map0] + maps
		super(dmap, self).__init__(*maps)

	def __repr__(self):
		return '<{} {:x} {}>'.format(
			self.__class__.__name__, id(self), repr(self._asdict()) )

	def _asdict(self):
		items = dict()
		for k, v in self.items():
			if isinstance(v, self.__class__): v = v._asdict()
			items[k] = v
		return items

	def _set_attr(self, k, v):
		self.__dict__[k] = v

	def __iter__(self):
		key_set = dict.fromkeys(set().union(*self.maps), True)
		return filter(lambda k: key_set.pop(k, False), it.chain.from_iterable(self.maps))

	def __getitem__(self, k):
		k_maps = list()
		for m in self.maps:
			if k in m:
				if isinstance(m[k], Mapping): k_maps.append(m[k])
				elif not (m[k] is None and k_maps): return m[k]
		if not k_maps: raise KeyError(k)
		return self.__class__(*k_maps)

	def __getattr__(self, k):
		try: return self[k]
		except KeyError: raise AttributeError(k)

	def __setattr__(self, k, v):
		for m in map(op.attrgetter('__dict__'), [self] + self.__class__.mro()):
			if k in m:
				self._set_attr(k, v)
				break
		else: self[k] = v

	def __delitem__(self, k):
		for m in self.maps:
			if k in m: del m[k]


def yaml_load(stream, dict_cls=OrderedDict, loader_cls=yaml.SafeLoader):
	if not hasattr(yaml_load, '_cls'):
		class CustomLoader(loader_cls): pass
		def construct_mapping(loader, node):
			loader.flatten_mapping(node)
			return dict_cls(loader.construct_pairs(node))
		CustomLoader.add_constructor(
			yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping )
		yaml_load._cls = CustomLoader
	return yaml.load(stream, yaml_load._cls)

def load_test_data(path_dir, path_stem, name):
	'Load test data from specified YAML file and return as dmap object.'
	with (path_dir / '{}.test.{}.yaml'.format(path_stem, name)).open(encoding='utf-8') as src:
		return dmap(yaml_load(src))


def struct_from_val(val, cls, as_tuple=False):
	if isinstance(val, (tuple, list)): val = cls(*val)
	elif isinstance(val, (dmap, dict, OrderedDict)): val = cls(**val)
	else: raise ValueError(val)
	return val if not as_tuple else br.u.attr.astuple(val)

@br.u.attr_struct
class TestStop:
	lng = br.u.attr_init()
	lat = br.u.attr_init()
	name = br.u.attr_init(None)
	road = br.u.attr_init(None)
	township = br.u.attr_init(None)

@br.u.attr_struct
class TestGoal:
	src = br.u.attr_init()
	dst = br.u.attr_init()
	count = br.u.attr_init(10)
	units = br.u.attr_init('kilometers')



def snapshot_from_test_data(snapshot_data):
	'''Build Snapshot from test data, where stops are {id: [lng, lat, name, ...]}
			and routes are either {route_id: [stop_id, ...]} or full {route_id: {stops: ..., ...}}.
		Stop names default to their ids, and route coordinates to a line through route stops.'''
	stops = dict()
	for stop_id, stop_data in snapshot_data.stops.items():
		ts = struct_from_val(stop_data, TestStop)
		stops[stop_id] = br.t.public.Stop(
			stop_id, ts.name or stop_id, ts.road or 'Test Rd',
			ts.township or 'Testville', ts.lat, ts.lng )
	routes = list()
	for route_id, route_data in (snapshot_data.routes or dict()).items():
		if not isinstance(route_data, Mapping): route_data = dict(stops=route_data)
		coords = route_data.get('coordinates')
		if not coords: coords = list(stops[stop_id].coordinates for stop_id in route_data['stops'])
		routes.append(br.t.public.Route(
			route_id, route_data['stops'], coords,
			name=dict(en='Route {}'.format(route_id)), color=route_data.get('color') ))
	return br.t.public.Snapshot(stops.values(), routes)


def route_line_stops(route_id, *stop_ids, lng0=96.1, lat0=16.8, step=0.01):
	'Return (stops, route) tuple for a straight west-east route through new stops.'
	stops = list( br.t.public.Stop( stop_id, stop_id, 'Test Rd', 'Testville',
		lat0, lng0 + step * n ) for n, stop_id in enumerate(stop_ids) )
	route = br.t.public.Route( route_id,
		stop_ids, list(stop.coordinates for stop in stops) )
	return stops, route



class ItineraryAssertions:

	distance_tolerance = 1e-9

	def __init__(self, router=None): self.router = router

	def assert_itinerary_properties(self, itineraries, count=None, router=None):
		'''Check properties that should hold for any search results:
			count limit, distance sums, transfer stops, no repeated routes, ranking order.'''
		router = router or self.router
		index = router.index
		if count is None: count = router.count
		if len(itineraries) > count:
			raise AssertionError('Too many itineraries: {} > {}'.format(len(itineraries), count))

		for itn in itineraries:
			dist_sum = sum(map(op.attrgetter('distance'), itn.steps))
			if abs(itn.distance - dist_sum) > self.distance_tolerance:
				raise AssertionError('[{}] distance mismatch: {} != {}'.format(itn.id, itn.distance, dist_sum))
			if not 1 <= len(itn.steps) <= 3 or len(itn.steps) != len(itn.routes):
				raise AssertionError('[{}] invalid number of legs/steps'.format(itn.id))

			route_ids = list(map(op.attrgetter('route_id'), itn.routes))
			if len(set(route_ids)) != len(route_ids):
				raise AssertionError('[{}] same route used twice'.format(itn.id))
			if itn.id != ' - '.join(route_ids):
				raise AssertionError('[{}] id does not match routes: {}'.format(itn.id, route_ids))
			if route_ids != list(step.route.route_id for step in itn.steps):
				raise AssertionError('[{}] routes/steps mismatch'.format(itn.id))

			for route_a, route_b in br.u.chunk_pairs(itn.routes):
				stop_a, stop_b = index.stop(route_a.stops[-1]), index.stop(route_b.stops[0])
				if stop_a.place != stop_b.place:
					raise AssertionError('[{}] legs {} -> {} are not connected: {} != {}'.format(
						itn.id, route_a.route_id, route_b.route_id, stop_a, stop_b ))

			for route in itn.routes:
				if len(route.stops) < 2:
					raise AssertionError('[{}] leg with less than 2 stops: {}'.format(itn.id, route))
				full_stops = list(index.route_stops(route))
				full_ids = list(map(op.attrgetter('id'), full_stops))
				n = full_ids.index(route.stops[0])
				if full_ids[n:n+len(route.stops)] != list(route.stops):
					raise AssertionError('[{}] leg stops are not contiguous on route: {}'.format(itn.id, route))

		for itn_a, itn_b in br.u.chunk_pairs(itineraries):
			if br.t.public.itinerary_rank_key(itn_a) > br.t.public.itinerary_rank_key(itn_b):
				raise AssertionError('Ranking order violated: {} before {}'.format(itn_a, itn_b))

	def assert_itinerary_results(self, test, itineraries, verbose=verbose):
		'Assert that itineraries match test-data (from YAML) in the same order.'
		if verbose:
			print('\n' + ' -'*5, 'Itineraries found:')
			for itn in itineraries: itn.pretty_print()
		expected = list((test.itineraries or dict()).items())
		if len(expected) != len(itineraries):
			raise AssertionError('Itinerary count mismatch: expected {}, found {} ({})'.format(
				len(expected), len(itineraries), list(map(op.attrgetter('id'), itineraries)) ))
		for (itn_id, legs), itn in zip(expected, itineraries):
			if itn.id != itn_id:
				raise AssertionError('Itinerary id mismatch: expected {!r}, found {!r}'.format(itn_id, itn.id))
			found = list(list(route.stops) for route in itn.routes)
			if found != list(map(list, legs)):
				raise AssertionError('[{}] leg stops mismatch: expected {}, found {}'.format(itn_id, legs, found))
