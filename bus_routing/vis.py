# Visualization tools, mostly useful for debugging

import itertools as it, operator as op, functools as ft
from collections import defaultdict
import contextlib

from . import utils as u


print_fmt = lambda tpl, *a, file=None, end='\n', **k:\
	print(tpl.format(*a,**k), file=file, end=end)

dot_str = lambda n: '"{}"'.format(str(n).replace('"', '\\"'))
dot_html = lambda n: '<{}>'.format(n)
html_escape = lambda s: str(s).replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')


@contextlib.contextmanager
def dot_graph(dst, dot_opts, indent=2):
	print_fmt('digraph {{', file=dst)
	if isinstance(indent, int): indent = ' '*indent
	p = lambda tpl, *a, end='\n', **k:\
		print_fmt(indent + tpl, *a, file=dst, end=end, **k)
	p('### Defaults')
	for t, opts in (dot_opts or dict()).items():
		p('{} [ {} ]'.format(t, ', '.join('{}={}'.format(k, v) for k, v in opts.items())))
	yield p
	print_fmt('}}', file=dst)


def dot_for_routes(stops, routes, dst, dot_opts=None):
	'''Dump stop/route graph in graphviz format, with
		node for each stop served by any route and edges between consecutive route stops.'''
	stops = dict((stop.id, stop) for stop in stops)
	stop_names, stop_edges = defaultdict(set), defaultdict(set)
	for route in routes:
		for n, stop_id in enumerate(route.stops):
			stop_names[stop_id].add('{}[{}]'.format(route.route_id, n))
		for stop_a, stop_b in u.chunk_pairs(route.stops):
			if stop_a != stop_b: stop_edges[stop_a].add(stop_b)

	with dot_graph(dst, dot_opts) as p:

		p('')
		p('### Labels')
		node_names = dict()
		for stop_id, route_names in stop_names.items():
			stop = stops.get(stop_id)
			label = '<b>{}</b>{}'.format(
				html_escape(stop.name if stop else stop_id),
				'<br/>- '.join([''] + sorted(map(html_escape, route_names))) )
			name = node_names[stop_id] = 'stop-{}'.format(stop_id)
			p('{} [label={}]'.format(dot_str(name), dot_html(label)))

		p('')
		p('### Edges')
		for stop_src, edges in stop_edges.items():
			name_src = node_names[stop_src]
			for stop_dst in sorted(edges, key=str):
				p('{} -> {}', *map(dot_str, [name_src, node_names[stop_dst]]))
