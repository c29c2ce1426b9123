# Line-geometry helpers - thin wrappers around shapely and geopy.
# Geometries use (lng, lat) coordinate order, same as GeoJSON.

import itertools as it, operator as op, functools as ft
import math

from geopy import distance as gd
from shapely.geometry import LineString, Point
from shapely.ops import substring

from . import types as t


DU = t.public.DistanceUnits

# Conversions from geopy Distance object, which is great-circle on a sphere here
length_units = {
	DU.meters: op.attrgetter('m'),
	DU.millimeters: lambda d: d.m * 1000,
	DU.centimeters: lambda d: d.m * 100,
	DU.kilometers: op.attrgetter('km'),
	DU.miles: op.attrgetter('miles'),
	DU.nauticalmiles: op.attrgetter('nm'),
	DU.inches: lambda d: d.ft * 12,
	DU.yards: lambda d: d.ft / 3,
	DU.feet: op.attrgetter('ft'),
	DU.radians: lambda d: d.km / gd.EARTH_RADIUS,
	DU.degrees: lambda d: math.degrees(d.km / gd.EARTH_RADIUS) }

def length_units_check(units):
	'Return DistanceUnits value for units, raising ValueError if these are not for length.'
	units = DU.get(units)
	if units not in length_units:
		raise ValueError('Not a unit of length: {}'.format(units.value))
	return units


def line_string(coordinates):
	return LineString(list(map(tuple, coordinates)))

def line_positions(points, line):
	'''Return distances along the line for (lng, lat) points visited in that order.
		Each point is projected onto the part of the line after the previous one,
			so that points passed more than once (e.g. on loop routes) get later positions.'''
	pos, positions = 0.0, list()
	for c in points:
		if pos < line.length: pos += substring(line, pos, line.length).project(Point(*c))
		positions.append(pos)
	return positions

def line_slice(line, pos_a, pos_b):
	'''Return part of the line between two distances along it, pos_a <= pos_b.
		Result is a Point geometry if both positions are the same.'''
	return substring(line, pos_a, pos_b)

def coords_list(geom):
	return list(t.public.Coordinates(*c[:2]) for c in geom.coords)

def line_length(geom, units):
	'Great-circle length of a line (or any geometry with coords) in specified units.'
	conv = length_units[length_units_check(units)]
	coords = list(geom.coords)
	if len(coords) < 2: return 0.0
	return conv(gd.great_circle(*((c[1], c[0]) for c in coords)))
