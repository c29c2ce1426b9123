#!/usr/bin/env python3

import itertools as it, operator as op, functools as ft
import sys, json

import bus_routing as br


log = br.u.get_logger('br.cli')


def print_json(data, indent=2):
	print(json.dumps(data, ensure_ascii=False, indent=indent))

def print_itineraries(router, fmt):
	if fmt == 'json': print_json(list(itn.as_dict() for itn in router.results))
	elif fmt == 'geojson': print_json(router.itineraries.as_feature_collection(router.count))
	else: router.itineraries.pretty_print(router.count, units=router.units)


def main(args=None):
	conf_engine = br.engine.EngineConf()

	import argparse
	parser = argparse.ArgumentParser(
		description='Find direct and transfer bus itineraries between stops.')
	parser.add_argument('snapshot',
		help='Path to JSON or YAML file with "stops" and "routes" lists to load.')

	group = parser.add_argument_group('Search options')
	group.add_argument('-n', '--count', type=int, default=10, metavar='n',
		help='Max number of itineraries to find and output. Default: %(default)s')
	group.add_argument('-u', '--units',
		default='kilometers', metavar='units',
		choices=sorted(units.value for units in br.geo.length_units),
		help='Units to measure itinerary distances in. Default: %(default)s')
	group.add_argument('-f', '--format',
		default='plain', choices=['plain', 'json', 'geojson'],
		help='Output format for query results. Default: %(default)s')

	group = parser.add_argument_group('Misc/debug options')
	group.add_argument('--dot-for-routes', metavar='path',
		help='Dump Stop/Route graph (in graphviz dot format) to a specified file and exit.')
	group.add_argument('--dot-opts', metavar='yaml-data',
		help='Options for graphviz graph/nodes/edges to use with'
			' --dot-for-routes, as a YAML mappings. Example: {graph: {rankdir: LR}}')
	group.add_argument('--engine-conf', metavar='yaml-data',
		help='Override values for EngineConf as a YAML mapping.'
			' Example: {slice_from_segment_start: false}')
	group.add_argument('--debug', action='store_true', help='Verbose operation mode.')

	cmds = parser.add_subparsers(title='Commands', dest='call')

	cmd = cmds.add_parser('query',
		help='Find itineraries between two stops, specified by their ids.'
			' Other stop records for the same place (name, road, township) are used as well.')
	cmd.add_argument('stop_from', help='Stop ID to search itineraries from. Example: 10')
	cmd.add_argument('stop_to', help='Stop ID to search itineraries to. Example: 25')

	cmd = cmds.add_parser('query-names',
		help='Find itineraries between two places, specified by english stop names.')
	cmd.add_argument('name_from', help='Stop name to search itineraries from.')
	cmd.add_argument('name_to', help='Stop name to search itineraries to.')
	cmd.add_argument('--road-from', metavar='name', help='Road name for the origin stop.')
	cmd.add_argument('--road-to', metavar='name', help='Road name for the destination stop.')

	cmd = cmds.add_parser('stops',
		help='List stops matching all specified case-insensitive substrings, as JSON.')
	for k in 'id name road township'.split(): cmd.add_argument('--{}'.format(k), metavar='text')

	cmd = cmds.add_parser('routes',
		help='List routes matching all specified case-insensitive substrings, as JSON.')
	for k in 'route-id name color'.split(): cmd.add_argument('--{}'.format(k), metavar='text')

	opts = parser.parse_args(sys.argv[1:] if args is None else args)

	br.u.logging.basicConfig(
		format='%(asctime)s :: %(name)s %(levelname)s :: %(message)s',
		datefmt='%Y-%m-%d %H:%M:%S',
		level=br.u.logging.DEBUG if opts.debug else br.u.logging.WARNING )

	if opts.count < 1: parser.error('--count must be positive: {}'.format(opts.count))
	if opts.engine_conf:
		import yaml
		for k, v in (yaml.safe_load(opts.engine_conf) or dict()).items():
			if not hasattr(conf_engine, k):
				parser.error('Unrecognized engine conf option: {!r} (value: {!r})'.format(k, v))
			setattr(conf_engine, k, v)

	try:
		snapshot, router = br.init_router(
			opts.snapshot, count=opts.count, units=opts.units,
			conf_engine=conf_engine, timer_func=br.calc_timer )
	except br.data.SnapshotLoadError as err: parser.error(str(err))

	if opts.dot_for_routes:
		dot_opts = dict()
		if opts.dot_opts:
			import yaml
			dot_opts = yaml.safe_load(opts.dot_opts)
		with br.u.safe_replacement(opts.dot_for_routes) as dst:
			br.vis.dot_for_routes(snapshot.stops, snapshot.routes, dst, dot_opts=dot_opts)
		return

	if opts.call == 'query':
		for k in 'stop_from', 'stop_to':
			stop_id = getattr(opts, k)
			try: stop = router.index.stop(int(stop_id) if stop_id.isdigit() else stop_id)
			except KeyError:
				try: stop = router.index.stop(stop_id)
				except KeyError: parser.error('Unknown stop id: {!r}'.format(stop_id))
			stops = [stop] + list(s for s in router.index.siblings(stop) if s != stop)
			(router.set_origin if k == 'stop_from' else router.set_destination)(stops)
		outcome = router.search()
		log.debug('Search outcome: {}', outcome.value)
		print_itineraries(router, opts.format)

	elif opts.call == 'query-names':
		for name, road, set_func in [
				(opts.name_from, opts.road_from, router.set_origin),
				(opts.name_to, opts.road_to, router.set_destination) ]:
			stops = br.data.stop_candidates(snapshot.stops, name, road)
			if not stops: parser.error('No stops found for name: {!r}'.format(name))
			set_func(stops)
		outcome = router.search()
		log.debug('Search outcome: {}', outcome.value)
		print_itineraries(router, opts.format)

	elif opts.call == 'stops':
		stops = br.data.search_stops( snapshot.stops,
			name=opts.name, road=opts.road, township=opts.township, id=opts.id )
		print_json(list(
			dict(br.u.attr.asdict(stop), coordinates=stop.coordinates._asdict())
			for stop in stops ))

	elif opts.call == 'routes':
		routes = br.data.search_routes(
			snapshot.routes, route_id=opts.route_id, name=opts.name, color=opts.color )
		print_json(list(map(br.t.public.route_dict, routes)))

	else: parser.error('Action not implemented: {}'.format(opts.call))

if __name__ == '__main__': sys.exit(main())
