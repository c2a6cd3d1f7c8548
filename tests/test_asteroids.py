#!/usr/bin/env python3

from __future__ import annotations

import math
import unittest

import httpx

from impactsim.asteroids import (
    DEFAULT_DENSITY_KG_M3,
    CometRecord,
    asteroid_mass,
    default_asteroids,
    default_comets,
    estimate_diameter_from_h,
    fetch_asteroid,
    fetch_close_approaches,
    fetch_near_earth_asteroids,
    fetch_near_earth_comets,
    impact_speed_range_kmh,
)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


class AsteroidHelperTests(unittest.TestCase):
    def test_diameter_from_absolute_magnitude(self) -> None:
        # H=15, p=0.25 -> 1329/0.5 * 10^-3 km = 2.658 km
        self.assertAlmostEqual(estimate_diameter_from_h(15.0, albedo=0.25), 2658.0, places=6)

    def test_mass_of_sphere(self) -> None:
        self.assertAlmostEqual(asteroid_mass(2.0, 1000.0), 4.0 / 3.0 * math.pi * 1000.0)

    def test_defaults_are_real_named_asteroids(self) -> None:
        names = [a.name for a in default_asteroids()]
        self.assertEqual(names, ["Apophis", "Bennu", "Eros"])
        bennu = default_asteroids()[1]
        self.assertEqual(bennu.density_kg_m3, 1260.0)
        self.assertAlmostEqual(bennu.mass_kg, asteroid_mass(490.0, 1260.0))

    def test_speed_ranges_in_kmh(self) -> None:
        self.assertEqual(impact_speed_range_kmh("asteroid"), {"min": 39600.0, "max": 118800.0, "avg": 72000.0})
        self.assertEqual(impact_speed_range_kmh("comet")["avg"], 216000.0)


class SbdbClientTests(unittest.TestCase):
    def test_query_rows_are_parsed_and_defaulted(self) -> None:
        payload = {
            "fields": ["full_name", "diameter", "H", "albedo", "density"],
            "data": [
                ["  433 Eros (A898 PA)", "16.84", "10.4", "0.25", "2.67"],
                ["  (2023 AB)", None, "22.0", None, None],
            ],
        }
        with _client(lambda request: httpx.Response(200, json=payload)) as client:
            rows = fetch_near_earth_asteroids(client=client)
        eros, small = rows
        self.assertEqual(eros.name, "433 Eros (A898 PA)")
        self.assertAlmostEqual(eros.diameter_m, 16840.0)
        self.assertAlmostEqual(eros.density_kg_m3, 2670.0)
        self.assertEqual(small.albedo, 0.14)
        self.assertEqual(small.density_kg_m3, DEFAULT_DENSITY_KG_M3)
        self.assertAlmostEqual(small.diameter_m, estimate_diameter_from_h(22.0))

    def test_query_failure_returns_defaults(self) -> None:
        with _client(lambda request: httpx.Response(500)) as client:
            rows = fetch_near_earth_asteroids(client=client)
        self.assertEqual(len(rows), 3)
        self.assertEqual(rows[0].name, "Apophis")

    def test_query_without_rows_returns_defaults(self) -> None:
        payload = {"fields": ["full_name"], "data": []}
        with _client(lambda request: httpx.Response(200, json=payload)) as client:
            rows = fetch_near_earth_asteroids(client=client)
        self.assertEqual(rows[2].name, "Eros")

    def test_single_lookup(self) -> None:
        payload = {
            "object": {"fullname": "99942 Apophis (2004 MN4)", "des": "99942"},
            "phys_par": [
                {"name": "diameter", "value": "0.34"},
                {"name": "H", "value": "19.09"},
                {"name": "albedo", "value": "0.35"},
            ],
            "orbit": {"elements": [
                {"name": "e", "value": "0.1914"},
                {"name": "a", "value": "0.9224"},
                {"name": "i", "value": "3.339"},
            ]},
        }
        with _client(lambda request: httpx.Response(200, json=payload)) as client:
            rec = fetch_asteroid("Apophis", client=client)
        self.assertIsNotNone(rec)
        self.assertEqual(rec.name, "99942 Apophis (2004 MN4)")
        self.assertAlmostEqual(rec.diameter_m, 340.0)
        self.assertEqual(rec.density_kg_m3, DEFAULT_DENSITY_KG_M3)
        self.assertAlmostEqual(rec.orbital_elements.inclination_deg, 3.339)

    def test_single_lookup_unknown_returns_none(self) -> None:
        with _client(lambda request: httpx.Response(200, json={"message": "not found"})) as client:
            self.assertIsNone(fetch_asteroid("nope", client=client))
        with _client(lambda request: httpx.Response(404)) as client:
            self.assertIsNone(fetch_asteroid("nope", client=client))

    def test_close_approaches(self) -> None:
        payload = {
            "fields": ["des", "orbit_id", "jd", "cd", "dist", "dist_min", "dist_max",
                       "v_rel", "v_inf", "t_sigma_f", "h"],
            "data": [["2020 QG", "3", "2459077.5", "2020-Aug-16 04:09", "0.000196",
                      "0.000196", "0.000196", "12.33", "7.99", "< 00:01", "29.9"]],
        }
        with _client(lambda request: httpx.Response(200, json=payload)) as client:
            approaches = fetch_close_approaches(client=client)
        self.assertEqual(len(approaches), 1)
        ca = approaches[0]
        self.assertEqual(ca.designation, "2020 QG")
        self.assertEqual(ca.date, "2020-Aug-16 04:09")
        self.assertAlmostEqual(ca.velocity_kms, 12.33)
        self.assertAlmostEqual(ca.diameter_m, estimate_diameter_from_h(29.9))

    def test_close_approaches_failure_is_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with _client(handler) as client:
            self.assertEqual(fetch_close_approaches(client=client), [])


class CometClientTests(unittest.TestCase):
    def test_rows_are_parsed_with_either_field_spelling(self) -> None:
        seen = []
        payload = [
            {"object": "P/2004 R1 (McNaught)", "q_au_1": "0.986", "e": "0.682",
             "i_deg": "4.89", "tp_tdb": "2455249.8", "p_yr": "5.48"},
            {"object_name": "1P/Halley", "q": "0.586", "e": "0.967", "i": "162.3",
             "tp": "2061-07-28", "period": "75.3", "h": "4.0"},
        ]

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=payload)

        with _client(handler) as client:
            comets = fetch_near_earth_comets(limit=2, client=client)
        self.assertEqual(seen[0].url.params["$limit"], "2")
        mcnaught, halley = comets
        self.assertEqual(mcnaught.name, "P/2004 R1 (McNaught)")
        self.assertAlmostEqual(mcnaught.perihelion_distance_au, 0.986)
        self.assertAlmostEqual(mcnaught.inclination_deg, 4.89)
        self.assertEqual(mcnaught.perihelion_date, "2455249.8")
        self.assertAlmostEqual(mcnaught.period_years, 5.48)
        self.assertEqual(mcnaught.absolute_magnitude, 15.0)
        self.assertEqual(halley, CometRecord("1P/Halley", 0.586, 0.967, 162.3, "2061-07-28", 75.3, 4.0))

    def test_missing_values_take_defaults(self) -> None:
        with _client(lambda request: httpx.Response(200, json=[{"q": "n/a", "e": "NaN"}])) as client:
            (comet,) = fetch_near_earth_comets(client=client)
        self.assertEqual(comet, CometRecord("Unknown", 1.0, 0.5, 0.0, "", 0.0, 15.0))

    def test_failure_and_empty_results_fall_back_to_halley(self) -> None:
        expected = default_comets()
        self.assertEqual(expected[0].name, "Halley")
        with _client(lambda request: httpx.Response(503)) as client:
            self.assertEqual(fetch_near_earth_comets(client=client), expected)
        with _client(lambda request: httpx.Response(200, json=[])) as client:
            self.assertEqual(fetch_near_earth_comets(client=client), expected)
        with _client(lambda request: httpx.Response(200, text="not json")) as client:
            self.assertEqual(fetch_near_earth_comets(client=client), expected)


if __name__ == "__main__":
    unittest.main()
