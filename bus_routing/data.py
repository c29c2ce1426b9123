import itertools as it, operator as op, functools as ft
from pathlib import Path
import re, json

import yaml

from . import utils as u, types as t


log = u.get_logger('br.data')


class SnapshotLoadError(Exception): pass


route_keys = set(['route_id', 'stops', 'coordinates', 'name', 'color'])

def stop_from_record(rec):
	try:
		return t.public.Stop( rec['id'], rec['name'],
			rec.get('road'), rec.get('township'), rec['lat'], rec['lng'] )
	except (KeyError, TypeError, ValueError) as err:
		raise SnapshotLoadError('Invalid stop record: {!r} ({})'.format(rec, err)) from None

def route_from_record(rec):
	'Route from record mapping, with all unrecognized keys stored in Route.props.'
	try:
		return t.public.Route(
			rec['route_id'], rec['stops'], rec['coordinates'],
			name=rec.get('name'), color=rec.get('color'),
			props=dict((k, v) for k, v in rec.items() if k not in route_keys) )
	except (KeyError, TypeError, ValueError) as err:
		raise SnapshotLoadError('Invalid route record: {!r} ({})'.format(rec, err)) from None


def parse_snapshot(data):
	'Build Snapshot from {stops: [...], routes: [...]} mapping of plain records.'
	if not isinstance(data, dict) or not {'stops', 'routes'}.issubset(data):
		raise SnapshotLoadError('Snapshot data must be a mapping with "stops" and "routes" lists')
	stops = list(map(stop_from_record, data['stops'] or list()))
	routes = sorted(
		map(route_from_record, data['routes'] or list()),
		key=op.attrgetter('route_id') )
	log.debug('Parsed snapshot: stops={:,} routes={:,}', len(stops), len(routes))
	return t.public.Snapshot(stops, routes)

def load_snapshot(path):
	'Load Snapshot from JSON or YAML file, picked by file extension.'
	path = Path(path)
	with path.open(encoding='utf-8') as src:
		try:
			if path.suffix.lower() in ['.yaml', '.yml']: data = yaml.safe_load(src)
			else: data = json.load(src)
		except (ValueError, yaml.YAMLError) as err:
			raise SnapshotLoadError('Failed to parse snapshot file {}: {}'.format(path, err)) from None
	return parse_snapshot(data)


### Stop/route lookups, similar to what database queries would return

def _filter_regexps(filters):
	return list( (k, re.compile(re.escape(v), re.I))
		for k, v in filters.items() if isinstance(v, str) and v )

def _field_match(value, regex):
	if isinstance(value, t.public.Label): return value.matches(regex)
	return value is not None and bool(regex.search(str(value)))

def search_stops(stops, name=None, road=None, township=None, id=None):
	'''Return stops where every specified field contains specified text,
		case-insensitive and for any language of the label.'''
	filters = _filter_regexps(dict(name=name, road=road, township=township, id=id))
	return list( stop for stop in stops
		if all(_field_match(getattr(stop, k), regex) for k, regex in filters) )

def search_routes(routes, route_id=None, name=None, color=None):
	'Same as search_stops(), but for routes, and with results sorted by route_id.'
	filters = _filter_regexps(dict(route_id=route_id, name=name, color=color))
	return sorted(
		( route for route in routes
			if all(_field_match(getattr(route, k), regex) for k, regex in filters) ),
		key=op.attrgetter('route_id') )

def stop_candidates(stops, name, road=None, township=None, prefer_id=None):
	'''Return all stop records for the place with specified english name/road/township.
		Matching is exact, but case-insensitive, with road/township checked only if specified.
		Stop with prefer_id (if any) is moved to the front of the list.'''
	norm = lambda v: (v or '').strip().lower()
	checks = list(filter(op.itemgetter(1), [
		('name', norm(name)), ('road', norm(road)), ('township', norm(township)) ]))
	if not checks: return list()
	candidates = list( stop for stop in stops
		if all(norm(getattr(stop, k).en) == v for k, v in checks) )
	candidates.sort(key=lambda stop: stop.id != prefer_id)
	return candidates
