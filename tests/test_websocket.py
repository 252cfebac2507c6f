def _receive_until(ws, kind):
    while True:
        message = ws.receive_json()
        if message['type'] == kind:
            return message


def test_health_and_empty_room_list(client):
    assert client.get('/health').json() == {'status': 'ok', 'rooms': 0}
    assert client.get('/rooms').json() == []
    assert client.get('/rooms/ABCD').status_code == 404


def test_full_round_over_websockets(client):
    with client.websocket_connect('/ws') as alice:
        alice.send_json({'type': 'createRoom', 'playerId': 'a', 'playerName': 'Alice'})
        created = alice.receive_json()
        assert created['type'] == 'roomCreated'
        assert created['isHost'] is True
        code = created['roomCode']
        assert alice.receive_json()['totalPlayers'] == 1

        with client.websocket_connect('/ws') as bob:
            bob.send_json({'type': 'joinRoom', 'roomCode': code, 'playerId': 'b', 'playerName': 'Bob'})
            joined = bob.receive_json()
            assert joined == {'type': 'joinResponse', 'roomCode': code, 'playerId': 'b', 'isHost': False, 'rejoined': False}
            assert bob.receive_json()['totalPlayers'] == 2
            assert alice.receive_json()['totalPlayers'] == 2

            listing = client.get('/rooms').json()
            assert listing == [{
                'room_code': code,
                'host_name': 'Alice',
                'player_count': 2,
                'disconnected_count': 0,
                'phase': 'lobby',
            }]

            # Start: private cards first, then the shared snapshot
            alice.send_json({'type': 'start', 'roomCode': code, 'playerId': 'a'})
            alice_cards = alice.receive_json()['cards']
            bob_cards = bob.receive_json()['cards']
            assert len(alice_cards) == 2 and len(bob_cards) == 2
            assert not set(alice_cards) & set(bob_cards)
            assert alice.receive_json()['gameStarted'] is True
            assert bob.receive_json()['gameStarted'] is True

            # Non-host end is rejected privately
            bob.send_json({'type': 'end', 'roomCode': code, 'playerId': 'b'})
            assert bob.receive_json()['code'] == 'not_host'

            bob.send_json({'type': 'die', 'roomCode': code, 'playerId': 'b'})
            for ws in (alice, bob):
                state = ws.receive_json()
                entry = next(p for p in state['players'] if p['id'] == 'b')
                assert entry['isDied'] is True
                assert entry['hasCards'] is False

            alice.send_json({'type': 'end', 'roomCode': code, 'playerId': 'a'})
            for ws in (alice, bob):
                state = ws.receive_json()
                assert state['gameStarted'] is False
                assert state['isFirstGame'] is False

        # Bob's socket closed: Alice sees him gone
        state = alice.receive_json()
        assert state['totalPlayers'] == 1
        assert client.get(f'/rooms/{code}').json()['disconnected_count'] == 1

        with client.websocket_connect('/ws') as bob:
            bob.send_json({'type': 'joinRoom', 'roomCode': code, 'playerId': 'b', 'playerName': 'Bob'})
            joined = bob.receive_json()
            assert joined['rejoined'] is True
            state = bob.receive_json()
            assert state['type'] == 'gameState'
            me = next(p for p in state['players'] if p['id'] == 'b')
            assert me['cards'] == []
            assert _receive_until(alice, 'gameState')['totalPlayers'] == 2

            bob.send_json({'type': 'leaveRoom', 'roomCode': code, 'playerId': 'b'})
            assert bob.receive_json() == {'type': 'leftRoom'}
            assert alice.receive_json()['totalPlayers'] == 1


def test_garbage_frames_do_not_break_the_socket(client):
    with client.websocket_connect('/ws') as ws:
        ws.send_text('{{{')
        ws.send_json({'type': 'nonsense'})
        ws.send_json({'type': 'createRoom', 'playerId': 'x', 'playerName': 'X'})
        assert ws.receive_json()['type'] == 'roomCreated'
