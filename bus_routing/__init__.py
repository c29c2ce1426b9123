import itertools as it, operator as op, functools as ft
from pathlib import Path
import time

from . import engine, vis, geo, data, utils as u, types as t


def calc_timer(func, *args, log=u.get_logger('br.timer'), timer_name=None, **kws):
	if not timer_name:
		func_base = func if not isinstance(func, ft.partial) else func.func
		timer_name = '.'.join([func_base.__module__.strip('__'), func_base.__qualname__])
	log.debug('[{}] Starting...', timer_name)
	td = time.monotonic()
	res = func(*args, **kws)
	td = time.monotonic() - td
	log.debug('[{}] Finished in: {:.1f}s', timer_name, td)
	return res


def init_router( snapshot_path, count=10, units='kilometers',
		conf_engine=None, timer_func=None, log=u.get_logger('br.init') ):
	'Load stop/route snapshot from file and return (snapshot, router) tuple for it.'
	snapshot_func, router_func = data.load_snapshot,\
		ft.partial( engine.TransitRoutingEngine,
			count=count, units=units, conf=conf_engine, timer_func=timer_func )
	if timer_func: snapshot_func = ft.partial(timer_func, snapshot_func)

	snapshot = snapshot_func(Path(snapshot_path))
	log.debug(
		'Loaded snapshot: stops={:,}, routes={:,} (mean-stops={:,.1f})',
		len(snapshot.stops), len(snapshot.routes),
		sum(len(r.stops) for r in snapshot.routes) / (len(snapshot.routes) or 1) )

	router = router_func(snapshot.stops, snapshot.routes)
	return snapshot, router
