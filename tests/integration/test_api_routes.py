"""
Integration tests for the REST API blueprint.
"""

from config_factory import load_config
from bluffdict.core.game_modes import RoomSettings
from app import app, socketio, wire_services


class TestApiRoutes:
    """HTTP endpoints"""

    def setup_method(self):
        load_config()
        self.container = wire_services(socketio)
        self.game_manager = self.container.get('GameManager')
        self.client = app.test_client()

    def test_health(self):
        response = self.client.get('/api/health')

        assert response.status_code == 200
        body = response.get_json()
        assert body['status'] == 'ok'
        assert body['words_loaded'] is True
        assert body['word_count'] == self.container.get('ContentManager').get_word_count()

    def test_find_room_by_code(self):
        created = self.game_manager.create_room('host', 'Host', RoomSettings.from_options(8, 'es', 'no_reader'))
        self.game_manager.join_room_by_code(created['code'], 'ann', 'Ann')

        response = self.client.get(f"/api/rooms/{created['code'].lower()}")

        assert response.status_code == 200
        body = response.get_json()
        assert body['success'] is True
        assert body['data'] == {
            'room_id': created['room_id'],
            'code': created['code'],
            'status': 'lobby',
            'game_mode': 'no_reader',
            'lang_mode': 'es',
            'player_count': 2
        }

    def test_unknown_code_is_404(self):
        response = self.client.get('/api/rooms/ZZZZZZ')

        assert response.status_code == 404
        assert response.get_json()['error']['code'] == 'ROOM_NOT_FOUND'

    def test_malformed_code_is_400(self):
        response = self.client.get('/api/rooms/AB')

        assert response.status_code == 400
        assert response.get_json()['error']['code'] == 'INVALID_ROOM_CODE'

    def test_leaderboard(self):
        created = self.game_manager.create_room('host', 'Host', RoomSettings.from_options(8))
        self.game_manager.join_room_by_code(created['code'], 'ann', 'Ann')

        response = self.client.get(f"/api/rooms/{created['room_id']}/leaderboard")

        assert response.status_code == 200
        data = response.get_json()['data']
        assert [entry['uid'] for entry in data['leaderboard']] == ['ann', 'host']
        assert data['target_score'] == 8
        assert data['game_over'] is False

    def test_leaderboard_unknown_room(self):
        response = self.client.get('/api/rooms/nosuchroom/leaderboard')

        assert response.status_code == 404
