"""Ski Resort Navigator - Find your way around a ski area.

Turns a ski area's runs and lifts into a directed, time-weighted routing
graph and answers navigation questions on it:
- Fastest route between runs, lifts, POIs or free map points
- Difficulty and lift-type filters with explanations when nothing is reachable
- Alternative routes and the sunniest route within a time tolerance
- Routing around closed lifts and runs

Modules:
    core: Foundation classes (geo calculations, sun position, formatting)
    model: Data structures (SkiAreaDetails, Node, Edge, NavigationGraph, Route)
    generators: Graph building and filtering
    routing: Path finding, optimization, sun exposure, planner facade
    ui: Streamlit viewer components (state machine, map, charts)

Example:
    from skiresort_navigator.generators import build_navigation_graph
    from skiresort_navigator.routing import find_route

    graph = build_navigation_graph(ski_area=area)
    route = find_route(graph=graph, from_node_id="lift-7-end", to_node_id="run-42-start")
"""
