import itertools as it, operator as op, functools as ft
from collections import Counter

from . import geo, utils as u, types as t


@u.attr_struct(vals_to_attrs=True)
class EngineConf:
	# False - legacy behavior, slicing geometry of the first leg starting from its last stop,
	#  which produces zero-length first legs.
	slice_from_segment_start = True
	log_progress_for = None # or a set/list of prefixes
	log_progress_steps = 30


def timer(self_or_func, func=None, *args, **kws):
	'Calculation call wrapper for timer/progress logging.'
	if not func: return lambda s,*a,**k: s.timer_wrapper(self_or_func, s, *a, **k)
	return self_or_func.timer_wrapper(func, *args, **kws)


def extract_segment(stops_from, stops_to, route_stops):
	'''Return contiguous part of route_stops sequence from first stop in stops_from
			to the first one in stops_to after it, including both, or empty list if there is none.
		Multiple from/to stops are allowed to match any sibling stop records for same place.'''
	ids_from, ids_to = (set(stop.id for stop in stops) for stops in [stops_from, stops_to])
	for n, stop in enumerate(route_stops):
		if stop.id in ids_from: break
	else: return list()
	for m, stop in enumerate(route_stops[n+1:], n+1):
		if stop.id in ids_to: return list(route_stops[n:m+1])
	return list()


class SnapshotError(Exception): pass

class TransitRoutingEngine:

	def __init__( self, stops, routes,
			count=10, units='kilometers', conf=None, timer_func=None ):
		'''Creates bus routing engine for stops/routes snapshot.
			Snapshot is checked for consistency and indexed here,
				raising SnapshotError if e.g. routes reference stops that are missing from it.'''
		self.conf, self.log = conf or EngineConf(), u.get_logger('br')
		self.timer_wrapper = timer_func if timer_func else lambda f,*a,**k: f(*a,**k)
		if count < 1: raise ValueError('Result count must be positive: {!r}'.format(count))
		self.count, self.units = count, geo.length_units_check(units)

		snapshot = t.public.Snapshot(stops, routes)
		self.check_snapshot(snapshot)
		self.index = self.timer_wrapper(t.base.TransferIndex.build, snapshot)
		self.lines, self.positions = self.index_geometry(snapshot)
		self.log.debug( 'Indexed snapshot: stops={:,} routes={:,} transfer-stops={:,}',
			len(snapshot.stops), len(snapshot.routes),
			sum(1 for point in self.index if len(point.routes) > 1) )

		self.stops_src = self.stops_dst = None
		self._itineraries = t.public.ItinerarySet()

	@u.coroutine
	def progress_iter(self, prefix, n_max, steps=None, n=0):
		'Progress logging helper coroutine for long calculations.'
		prefix_set = self.conf.log_progress_for
		if not prefix_set or prefix not in prefix_set:
			while True: yield # dry-run
		if not steps: steps = self.conf.log_progress_steps
		steps = min(n_max, steps)
		step_n = steps and n_max / steps
		msg_tpl = '[{{}}] Step {{:>{0}.0f}} / {{:{0}d}}{{}}'.format(len(str(steps)))
		while True:
			dn_msg = yield
			if isinstance(dn_msg, tuple): dn, msg = dn_msg
			elif isinstance(dn_msg, int): dn, msg = dn_msg, None
			else: dn, msg = 1, dn_msg
			n += dn
			if n == dn or n % step_n < 1:
				if msg:
					if not isinstance(msg, str): msg = msg[0].format(*msg[1:])
					msg = ': {}'.format(msg)
				self.log.debug(msg_tpl, prefix, n / step_n, steps, msg or '')


	@timer
	def check_snapshot(self, snapshot):
		'Raise SnapshotError for any inconsistencies in stop/route data.'
		problems = list()
		for kind, ids in [
				('stop', map(op.attrgetter('id'), snapshot.stops)),
				('route', map(op.attrgetter('route_id'), snapshot.routes)) ]:
			for obj_id, n in Counter(ids).items():
				if n > 1: problems.append(('Duplicate {} id: {!r} (x{})', kind, obj_id, n))
		stop_ids = set(map(op.attrgetter('id'), snapshot.stops))
		for route in snapshot.routes:
			for stop_id in route.stops:
				if stop_id in stop_ids: continue
				problems.append(('Route {!r} references unknown stop: {!r}', route.route_id, stop_id))
			if len(route.coordinates) < 2:
				problems.append(( 'Route {!r} geometry has less'
					' than two points: {}', route.route_id, len(route.coordinates) ))
		if problems:
			u.log_lines(self.log.debug, [('Snapshot problems ({}):', len(problems))] + problems)
			raise SnapshotError(problems[0][0].format(*problems[0][1:]), len(problems))

	@timer
	def index_geometry(self, snapshot):
		'''Return {route_id: LineString} and {route_id: stop positions along line} mappings,
			with positions in route stop order, i.e. non-decreasing.'''
		lines, positions = dict(), dict()
		for route in snapshot.routes:
			line = lines[route.route_id] = geo.line_string(route.coordinates)
			positions[route.route_id] = tuple(geo.line_positions(
				(stop.coordinates for stop in self.index.route_stops(route)), line ))
		return lines, positions


	def set_origin(self, candidates):
		'Set stops to search journeys from, all for the same place, preferred one first.'
		self.stops_src = list(candidates)

	def set_destination(self, candidates):
		'Set stops to search journeys to, same as with set_origin().'
		self.stops_dst = list(candidates)

	@property
	def results(self):
		'Ranked itineraries from the last search, up to "count" of them.'
		return self._itineraries.ranked(self.count)

	@property
	def itineraries(self):
		'All itineraries from the last search, in order in which they were found.'
		return self._itineraries


	@timer
	def search(self):
		'''Find direct, one- and two-transfer itineraries between origin and destination.
			Search stops as soon as "count" itineraries are found,
				and returns SearchOutcome, with itineraries available via "results" property.'''
		state = t.base.SearchState(self.count)
		self._itineraries = state.finalize()
		if not (self.stops_src and self.stops_dst):
			self.log.debug('Search origin/destination not set, skipping it')
			return t.base.SearchOutcome.not_configured

		point_src, point_dst = map(self.index.resolve, [self.stops_src, self.stops_dst])
		if not (point_src and point_dst):
			self.log.debug( 'Origin/destination stops are not in the snapshot'
				' (src={}, dst={})', bool(point_src), bool(point_dst) )
			return t.base.SearchOutcome.not_found

		for pass_func in [
				self.search_direct, self.search_one_transfer, self.search_two_transfers ]:
			for itn in pass_func(state, point_src, point_dst):
				state.add(itn)
				if state.full: break
			else:
				self.log.debug('[{}] itineraries found so far: {:,}', pass_func.__name__, len(state))
				continue
			self.log.debug('[{}] reached itinerary count limit: {:,}', pass_func.__name__, len(state))
			break

		self._itineraries = state.finalize()
		return t.base.SearchOutcome.found\
			if self._itineraries else t.base.SearchOutcome.not_found


	def search_direct(self, state, point_src, point_dst):
		'Yield one-leg itineraries for routes going through both origin and destination.'
		ids_src, ids_dst = ( set(map(op.attrgetter('id'), stops))
			for stops in [self.stops_src, self.stops_dst] )
		for route in point_src.routes:
			route_stop_ids = set(route.stops)
			if not (route_stop_ids & ids_src and route_stop_ids & ids_dst): continue
			stops = extract_segment(self.stops_src, self.stops_dst, self.index.route_stops(route))
			if not stops: continue # goes in the other direction
			state.visit(route)
			yield self.itinerary([(route, stops)])

	def search_one_transfer(self, state, point_src, point_dst):
		'''Yield two-leg itineraries for origin/destination route pairs with common stops.
			Each origin route is used for one such itinerary at most.'''
		ids_dst = set(map(op.attrgetter('id'), self.stops_dst))
		for route_a, route_b in it.product(point_src.routes, point_dst.routes):
			if route_a == route_b or state.is_visited(route_a) or state.is_visited(route_b): continue
			if self.itinerary_id([route_a, route_b]) in state: continue

			stop_x = self.transfer_stop(route_a, route_b, exclude=ids_dst)
			if not stop_x: continue
			stops_x = self.index.siblings(stop_x)

			legs = [
				(route_a, extract_segment(
					self.stops_src, stops_x, self.index.route_stops(route_a) )),
				(route_b, extract_segment(
					stops_x, self.stops_dst, self.index.route_stops(route_b) )) ]
			if not all(map(op.itemgetter(1), legs)): continue
			state.visit(route_a)
			yield self.itinerary(legs)

	def search_two_transfers(self, state, point_src, point_dst):
		'Yield three-leg itineraries, joining origin/destination routes via any third route.'
		progress = self.progress_iter(
			'two-transfers', len(point_src.routes) * len(point_dst.routes) )
		for route_a, route_b in it.product(point_src.routes, point_dst.routes):
			progress.send(['itineraries={:,}', len(state)])
			if route_a == route_b: continue

			for route_j in self.index.routes:
				if route_j in (route_a, route_b) or state.is_visited(route_j): continue
				if self.itinerary_id([route_a, route_j, route_b]) in state: continue

				stop_x, stop_y = (
					self.transfer_stop(route, route_j) for route in [route_a, route_b] )
				if not (stop_x and stop_y): continue
				stops_x, stops_y = map(self.index.siblings, [stop_x, stop_y])

				legs = [
					(route_a, extract_segment(
						self.stops_src, stops_x, self.index.route_stops(route_a) )),
					(route_j, extract_segment(
						stops_x, stops_y, self.index.route_stops(route_j) )),
					(route_b, extract_segment(
						stops_y, self.stops_dst, self.index.route_stops(route_b) )) ]
				if not all(map(op.itemgetter(1), legs)): continue
				yield self.itinerary(legs)


	def transfer_stop(self, route, route_other, exclude=()):
		'''Return last stop on the route (in its order) that is also on
			the other route, skipping stop ids in exclude, or None if there are no such stops.'''
		stops_other = set(route_other.stops)
		for stop_id in reversed(route.stops):
			if stop_id in stops_other and stop_id not in exclude: return self.index.stop(stop_id)

	def itinerary_id(self, routes):
		return u.ids_joined(routes, key=op.attrgetter('route_id'))

	def itinerary(self, route_stops):
		'Build Itinerary from (route, stops) leg tuples, with sliced and measured geometry.'
		legs = list()
		for n, (route, stops) in enumerate(route_stops):
			# segments start at the first occurrence of their first stop on the route
			m = self.index.route_stops(route).index(stops[0])
			positions = self.positions[route.route_id]
			pos_a, pos_b = positions[m], positions[m + len(stops) - 1]
			if n == 0 and not self.conf.slice_from_segment_start: pos_a = pos_b
			geom = geo.line_slice(self.lines[route.route_id], pos_a, pos_b)
			legs.append(t.base.Leg( route, stops,
				geo.coords_list(geom), geo.line_length(geom, self.units) ))
		return t.public.Itinerary.from_legs(legs)
