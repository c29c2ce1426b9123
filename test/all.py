import unittest

from . import test_components
from . import test_search


def load_tests(loader=None, tests=None, pattern=None):
	if not loader: loader = unittest.defaultTestLoader
	if not tests: tests = unittest.TestSuite()
	for mod in test_components, test_search:
		tests.addTests(loader.loadTestsFromModule(mod))
	return tests

def iter_cases(suite):
	for test in suite:
		if isinstance(test, unittest.TestSuite): yield from iter_cases(test)
		else: yield test

class SpecificTestCasePicker:
	def __init__(self): self.suite = load_tests()
	def __getattr__(self, k):
		for test in iter_cases(self.suite):
			if test._testMethodName == k: return lambda: test
		raise AttributeError('No such test case: {}'.format(k))
case = SpecificTestCasePicker()
