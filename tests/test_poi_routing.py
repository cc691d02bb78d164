"""Tests for the nearest-toilet helper."""

import pytest

from skiresort_navigator.routing.poi_routing import find_nearest_poi, find_nearest_toilet, route_to_nearest_toilet


class TestNearestToilet:
    def test_nearest_from_summit(self, resort_graph, toilets) -> None:
        toilet = find_nearest_toilet(from_lat=46.0195, from_lng=7.0, graph=resort_graph, pois=toilets)
        assert toilet.id == "T2"

    def test_nearest_from_valley(self, resort_graph, toilets) -> None:
        toilet = find_nearest_toilet(from_lat=46.0001, from_lng=7.0, graph=resort_graph, pois=toilets)
        assert toilet.id == "T1"

    def test_toilet_off_network_ignored(self, resort_graph, toilets) -> None:
        """The hut toilet is closest to this point but too far from any run or lift."""
        toilet = find_nearest_toilet(from_lat=46.049, from_lng=7.049, graph=resort_graph, pois=toilets)
        assert toilet.id == "T2"
        only_far = [t for t in toilets if t.id == "T3"]
        assert find_nearest_toilet(from_lat=46.0, from_lng=7.0, graph=resort_graph, pois=only_far) is None

    def test_other_poi_types(self, resort_graph, toilets) -> None:
        poi = find_nearest_poi(from_lat=46.0, from_lng=7.0, graph=resort_graph, pois=toilets, poi_type="viewpoint")
        assert poi.id == "V1"
        assert find_nearest_poi(from_lat=46.0, from_lng=7.0, graph=resort_graph, pois=toilets, poi_type="restaurant") is None

    def test_unknown_poi_type(self, resort_graph, toilets) -> None:
        with pytest.raises(ValueError, match="Unknown POI type"):
            find_nearest_poi(from_lat=46.0, from_lng=7.0, graph=resort_graph, pois=toilets, poi_type="spa")


class TestRouteToNearestToilet:
    def test_route_from_current_position(self, resort_graph, toilets) -> None:
        toilet, result = route_to_nearest_toilet(graph=resort_graph, from_lat=46.0195, from_lng=7.0, pois=toilets)

        assert toilet.id == "T2"
        assert result.found
        assert result.route.start_node_id == "mappoint-current"
        assert result.route.end_node_id == "poi-T2"

    def test_base_graph_untouched(self, resort_graph, toilets) -> None:
        before = resort_graph.get_stats()
        route_to_nearest_toilet(graph=resort_graph, from_lat=46.0195, from_lng=7.0, pois=toilets)

        assert "poi-T2" not in resort_graph.nodes
        assert "mappoint-current" not in resort_graph.nodes
        assert resort_graph.get_stats() == before

    def test_route_from_known_node(self, resort_graph, toilets) -> None:
        toilet, result = route_to_nearest_toilet(
            graph=resort_graph, from_lat=46.0001, from_lng=7.0, pois=toilets, from_node_id="run-R1-end"
        )
        assert toilet.id == "T1"
        assert result.route.start_node_id == "run-R1-end"
        assert result.route.segments[-1].type.value == "walk"

    def test_no_toilet_near_network(self, resort_graph, toilets) -> None:
        only_far = [t for t in toilets if t.id == "T3"]
        assert route_to_nearest_toilet(graph=resort_graph, from_lat=46.0, from_lng=7.0, pois=only_far) is None
