import itertools as it, operator as op, functools as ft
from pathlib import Path
import unittest

from . import _common as c


class SearchScenarios(unittest.TestCase):

	@classmethod
	def setUpClass(cls):
		path_file = Path(__file__)
		cls.tests_data = c.load_test_data(path_file.parent, path_file.stem, 'scenarios')

	def init_router(self, test):
		snapshot = c.snapshot_from_test_data(test.snapshot)
		goal = c.struct_from_val(test.goal, c.TestGoal)
		router = c.br.engine.TransitRoutingEngine(
			snapshot.stops, snapshot.routes, count=goal.count,
			units=goal.units, timer_func=c.br.calc_timer )
		router.set_origin(list(map(router.index.stop, goal.src)))
		router.set_destination(list(map(router.index.stop, goal.dst)))
		return router, c.ItineraryAssertions(router)

	def _test_search_base(self, test_name):
		test = self.tests_data[test_name]
		router, checks = self.init_router(test)
		outcome = router.search()
		itineraries = router.results
		checks.assert_itinerary_properties(itineraries)
		checks.assert_itinerary_results(test, itineraries)
		self.assertEqual( outcome, c.br.t.base.SearchOutcome.found
			if test.itineraries else c.br.t.base.SearchOutcome.not_found )


	def test_direct_single_route(self):
		self._test_search_base('direct-single-route')

	def test_direct_middle_of_route(self):
		self._test_search_base('direct-middle-of-route')

	def test_direct_wrong_direction(self):
		self._test_search_base('direct-wrong-direction')

	def test_one_transfer(self):
		self._test_search_base('one-transfer')

	def test_two_transfers(self):
		self._test_search_base('two-transfers')

	def test_fewer_legs_ranked_first(self):
		self._test_search_base('fewer-legs-ranked-first')

	def test_fewer_stops_ranked_first(self):
		self._test_search_base('fewer-stops-ranked-first')

	def test_transfer_via_sibling_stop(self):
		self._test_search_base('transfer-via-sibling-stop')

	def test_sibling_origin_stops(self):
		self._test_search_base('sibling-origin-stops')

	def test_unreachable(self):
		self._test_search_base('unreachable')

	def test_count_limit_in_transfers(self):
		self._test_search_base('count-limit-in-transfers')

	def test_all_scenarios_have_tests(self):
		names = set( k[5:].replace('_', '-')
			for k in dir(self) if k.startswith('test_') and k != 'test_all_scenarios_have_tests' )
		self.assertEqual(set(self.tests_data.keys()) - names, set())
