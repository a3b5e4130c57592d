from types import SimpleNamespace

import mongomock
import pytest

from prepwise.database import ConnectionStateListener, Database


def event(was_known, is_known, address=("db.local", 27017)):
    return SimpleNamespace(
        server_address=address,
        previous_description=SimpleNamespace(is_server_type_known=was_known),
        new_description=SimpleNamespace(is_server_type_known=is_known),
    )


def test_listener_reports_connect_disconnect_reconnect():
    states = []
    listener = ConnectionStateListener(lambda state, address: states.append((state, address)))

    listener.description_changed(event(False, True))
    listener.description_changed(event(True, True))
    listener.description_changed(event(True, False))
    listener.description_changed(event(False, True))

    assert states == [
        ("connected", "db.local:27017"),
        ("disconnected", "db.local:27017"),
        ("reconnected", "db.local:27017"),
    ]


def test_database_lifecycle():
    states = []
    options = {}

    def factory(uri, **kwargs):
        options.update(kwargs)
        return mongomock.MongoClient()

    database = Database("mongodb://db.local", "lifecycle", client_factory=factory,
                        on_state_change=lambda state, address: states.append(state))

    with pytest.raises(RuntimeError):
        database["notes"]

    assert database.connect() is database
    assert database.connect() is database
    assert options["serverSelectionTimeoutMS"] == 5000
    assert isinstance(options["event_listeners"][0], ConnectionStateListener)
    assert "quiz_1_student_1" in database["submissions"].index_information()

    database.close()
    database.close()
    assert states == ["closed"]
    assert database.client is None
