import pytest
from sqlalchemy.exc import SQLAlchemyError

from schoolsite.errors import StorageError
from schoolsite.extensions import db
from schoolsite.models import Setting
from schoolsite.services import get_services
from schoolsite.services.settings import JSON_SETTING_DEFAULTS, decode_setting, encode_setting

JSON_VALUES = {
    'socialLinks': {'facebook': 'https://facebook.com/school', 'youtube': ''},
    'facilityCards': [
        {'iconClass': 'fas fa-flask', 'title': 'Science Lab', 'description': 'Fully equipped'},
        {'iconClass': 'fas fa-book', 'title': 'Library', 'description': '10,000 titles'},
    ],
    'heroGradient': {'color1': '#007bff', 'color2': '#6f42c1', 'direction': '45deg'},
    'aboutGradient': {'color1': '#e0c3fc', 'color2': '#8ec5fc', 'direction': 'to right'},
    'admissionsGradient': {'color1': '#007bff', 'direction': '135deg'},
    'academicsGradient': {'color1': '#f8f9fa', 'direction': 'to bottom right'},
    'facilitiesGradient': {'color1': '#f8f9fa', 'color2': '#ffffff'},
    'contactGradient': {'color1': '#ffffff', 'color2': '#e9ecef'},
}


def insert_raw(app, name, value):
    with app.app_context():
        db.session.add(Setting(setting_name=name, setting_value=value))
        db.session.commit()


def test_settings_empty_by_default(client):
    r = client.get('/api/settings')
    assert r.status_code == 200
    assert r.get_json() == {}


@pytest.mark.parametrize('name', sorted(JSON_SETTING_DEFAULTS))
def test_json_settings_round_trip(auth_client, name):
    value = JSON_VALUES[name]
    r = auth_client.post('/api/settings', json={'settings': {name: value}})
    assert r.status_code == 200
    assert r.get_json()['message'] == 'Settings saved successfully'

    assert auth_client.get('/api/settings').get_json()[name] == value


def test_scalar_values_are_stored_as_strings(app, auth_client):
    auth_client.post('/api/settings', json={'settings': {
        'schoolName': 'Greenfield Academy',
        'schoolTagline': None,
        'maxStudents': 450,
        'showBanner': False,
    }})

    settings = auth_client.get('/api/settings').get_json()
    assert settings['schoolName'] == 'Greenfield Academy'
    assert settings['schoolTagline'] == ''
    assert settings['maxStudents'] == '450'
    assert settings['showBanner'] == 'false'


def test_last_write_wins(app, auth_client):
    auth_client.post('/api/settings', json={'settings': {'schoolName': 'First'}})
    auth_client.post('/api/settings', json={'settings': {'schoolName': 'Second'}})

    assert auth_client.get('/api/settings').get_json()['schoolName'] == 'Second'
    with app.app_context():
        rows = db.session.execute(db.select(Setting).filter_by(setting_name='schoolName')).scalars().all()
        assert len(rows) == 1


def test_malformed_json_degrades_to_empty_default(app, client):
    insert_raw(app, 'heroGradient', '{not json')
    insert_raw(app, 'facilityCards', 'oops')
    insert_raw(app, 'socialLinks', '')
    insert_raw(app, 'schoolName', '{plain text is left alone')

    settings = client.get('/api/settings').get_json()
    assert settings['heroGradient'] == {}
    assert settings['facilityCards'] == []
    assert settings['socialLinks'] == {}
    assert settings['schoolName'] == '{plain text is left alone'


@pytest.mark.parametrize('payload', [
    {},
    {'settings': None},
    {'settings': ['not', 'an', 'object']},
    {'settings': 'schoolName=x'},
    ['settings'],
    'settings',
    42,
])
def test_save_rejects_missing_settings_object(auth_client, payload):
    r = auth_client.post('/api/settings', json=payload)
    assert r.status_code == 400
    assert "'settings'" in r.get_json()['error']


def test_set_many_rolls_back_every_entry(app, monkeypatch):
    def failing_commit():
        raise SQLAlchemyError('disk full')

    with app.app_context():
        store = get_services().settings
        store.set_many({'schoolName': 'Before'})

        monkeypatch.setattr(db.session, 'commit', failing_commit)
        with pytest.raises(StorageError):
            store.set_many({'schoolName': 'After', 'schoolTagline': 'New tagline'})
        monkeypatch.undo()

        assert store.get_all() == {'schoolName': 'Before'}


def test_decode_and_encode_helpers():
    assert decode_setting('facilityCards', None) == []
    assert decode_setting('contactGradient', '[1, 2') == {}
    assert decode_setting('schoolFont', "'Poppins', sans-serif") == "'Poppins', sans-serif"
    assert encode_setting({'a': 1}) == '{"a": 1}'
    assert encode_setting(None) == ''
    assert encode_setting('text') == 'text'
