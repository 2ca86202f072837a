"""
Flask web application for the AFV Range Map.
"""

import argparse
import logging
from flask import Flask, jsonify, request
from config import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    MAP_DATA_API_URL,
    REFRESH_INTERVAL_SECONDS,
)
from clients import CLIENT_TYPES
from data_ingester import MapDataClient
from map_controller import NetworkMap
from scheduler import RefreshScheduler

logger = logging.getLogger(__name__)


def create_app(network_map: NetworkMap) -> Flask:
    """
    Build the web application around an existing map controller.

    Args:
        network_map: Controller holding the registry, search and map state
    """
    app = Flask(__name__)

    def last_update():
        return network_map.last_update.isoformat() if network_map.last_update else None

    def json_body():
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else None

    @app.route('/api/map', methods=['GET'])
    def get_map():
        """Markers, range rings and view for the map front end."""
        return jsonify({
            **network_map.map_payload(),
            'last_update': last_update(),
        })

    @app.route('/api/clients', methods=['GET'])
    def get_clients():
        """Connected clients ordered by callsign."""
        clients = network_map.client_list()
        return jsonify({
            'clients': [{'callsign': callsign, 'text': text} for callsign, text in clients],
            'total_count': len(clients),
            'online_count': f"{len(clients)} clients connected",
            'last_update': last_update(),
        })

    @app.route('/api/in-range', methods=['GET'])
    def get_in_range():
        """In-range report for pilots matching the current search."""
        return jsonify({
            'search_term': network_map.filter_state.search_term,
            'groups': network_map.in_range_report(),
            'last_update': last_update(),
        })

    @app.route('/api/search', methods=['POST'])
    def set_search():
        """
        Update the ring search.

        Expected JSON body:
        {"term": "DAL"}
        """
        data = json_body()
        if data is None or not isinstance(data.get('term', ''), str):
            return jsonify({'error': 'Expected {"term": <string>}'}), 400

        network_map.set_search_term(data.get('term', ''))
        return jsonify({'search_term': network_map.filter_state.search_term})

    @app.route('/api/select', methods=['POST'])
    def select_client():
        """
        Center on a client and search for its callsign.

        Expected JSON body:
        {"callsign": "DAL123"}
        """
        data = json_body()
        callsign = data.get('callsign') if data else None
        if not isinstance(callsign, str) or not callsign:
            return jsonify({'error': 'Expected {"callsign": <string>}'}), 400

        if not network_map.select_client(callsign):
            return jsonify({'error': f'Client not found: {callsign}'}), 404

        return jsonify({
            'selected': callsign,
            'search_term': network_map.filter_state.search_term,
            'view': network_map.map_payload()['view'],
        })

    @app.route('/api/ring-layers/<client_type>', methods=['POST'])
    def toggle_ring_layer(client_type):
        """Show or hide all range rings of one client type."""
        client_type = client_type.upper()
        if client_type not in CLIENT_TYPES:
            return jsonify({'error': f'Unknown client type: {client_type}'}), 404

        hidden = network_map.toggle_ring_layer(client_type)
        return jsonify({'type': client_type, 'hidden': hidden})

    @app.route('/api/refresh', methods=['POST'])
    def refresh():
        """Force an immediate refresh from the map data API."""
        try:
            updated = network_map.reload_map_data()
        except Exception as e:
            logger.error(f"Error refreshing map data: {e}", exc_info=True)
            return jsonify({'error': str(e)}), 500

        if not updated:
            return jsonify({'error': 'Map data unavailable', 'last_update': last_update()}), 502
        return jsonify({'total_count': network_map.online_count(), 'last_update': last_update()})

    return app


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Live range map for voice network clients")
    parser.add_argument("--callsign", action="append", default=[],
                        help="Only show this callsign (repeatable)")
    parser.add_argument("--api-url", default=MAP_DATA_API_URL, help="Map data API endpoint")
    parser.add_argument("--refresh", type=float, default=REFRESH_INTERVAL_SECONDS,
                        help="Refresh interval in seconds")
    parser.add_argument("--host", default=DEFAULT_HOST, help="Web server host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="Web server port")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    network_map = NetworkMap(MapDataClient(api_url=args.api_url), allow_list=args.callsign)
    if network_map.filter_state.allow_list:
        logger.info(f"Only showing callsigns: {', '.join(sorted(network_map.filter_state.allow_list))}")

    scheduler = RefreshScheduler(network_map.reload_map_data, args.refresh)
    scheduler.start()

    app = create_app(network_map)
    try:
        # The reloader would start a second scheduler in the child process
        app.run(debug=args.debug, host=args.host, port=args.port, use_reloader=False)
    finally:
        scheduler.stop()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
