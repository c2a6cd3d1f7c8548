#!/usr/bin/env python3

from __future__ import annotations

import unittest

import httpx

from impactsim.earthquakes import (
    MINOR_EARTHQUAKE,
    compare_earthquake_magnitude,
    fetch_earthquakes_near,
    fetch_recent_earthquakes,
)


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def _feature(eid: str, mag: float) -> dict:
    return {
        "id": eid,
        "properties": {"mag": mag, "place": "somewhere", "time": 1700000000000, "type": "earthquake"},
        "geometry": {"coordinates": [142.0, 38.0, 10.5]},
    }


class EarthquakeComparisonTests(unittest.TestCase):
    def test_top_band_is_valdivia(self) -> None:
        self.assertIn("Valdivia", compare_earthquake_magnitude(9.6))
        self.assertIn("Valdivia", compare_earthquake_magnitude(9.5))

    def test_lower_bounds_are_inclusive(self) -> None:
        self.assertIn("Tōhoku", compare_earthquake_magnitude(9.0))
        self.assertIn("Tōhoku", compare_earthquake_magnitude(9.49))
        self.assertIn("San Francisco", compare_earthquake_magnitude(8.0))
        self.assertIn("Haiti", compare_earthquake_magnitude(7.0))
        self.assertIn("Moderate", compare_earthquake_magnitude(6.0))

    def test_below_six_is_minor(self) -> None:
        self.assertEqual(compare_earthquake_magnitude(5.0), MINOR_EARTHQUAKE)
        self.assertTrue(compare_earthquake_magnitude(5.99).startswith("Minor to light"))
        self.assertEqual(compare_earthquake_magnitude(-2.0), MINOR_EARTHQUAKE)


class UsgsClientTests(unittest.TestCase):
    def test_parses_recent_events(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json={"features": [_feature("us1", 7.8), _feature("us2", 6.4)]})

        with _client(handler) as client:
            quakes = fetch_recent_earthquakes(min_magnitude=6.0, limit=2, client=client)
        self.assertEqual([q.id for q in quakes], ["us1", "us2"])
        self.assertEqual(quakes[0].magnitude, 7.8)
        self.assertEqual(quakes[0].depth_km, 10.5)
        self.assertEqual((quakes[0].latitude, quakes[0].longitude), (38.0, 142.0))
        self.assertEqual(seen["orderby"], "magnitude")
        self.assertEqual(seen["limit"], "2")

    def test_recent_falls_back_on_http_error(self) -> None:
        with _client(lambda request: httpx.Response(503)) as client:
            quakes = fetch_recent_earthquakes(client=client)
        self.assertEqual([q.id for q in quakes], ["default1", "default2"])

    def test_recent_falls_back_on_empty_feed(self) -> None:
        with _client(lambda request: httpx.Response(200, json={"features": []})) as client:
            quakes = fetch_recent_earthquakes(client=client)
        self.assertEqual(len(quakes), 2)
        self.assertEqual(quakes[0].magnitude, 9.1)

    def test_recent_falls_back_on_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with _client(handler) as client:
            quakes = fetch_recent_earthquakes(client=client)
        self.assertEqual(quakes[1].place, "2004 Indian Ocean")

    def test_nearby_sends_location_and_returns_empty_on_garbage(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, text="not json")

        with _client(handler) as client:
            quakes = fetch_earthquakes_near(35.0, 139.0, radius_km=300.0, client=client)
        self.assertEqual(quakes, [])
        self.assertEqual(seen["maxradiuskm"], "300.0")
        self.assertEqual(seen["latitude"], "35.0")


if __name__ == "__main__":
    unittest.main()
