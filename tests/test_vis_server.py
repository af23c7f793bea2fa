"""
Tests for the roll polar data server.
"""

import pytest

from rollpolar.vis import server


@pytest.fixture
def client(polar_config):
    """Flask test client backed by the temporary data root."""
    server.init_service(polar_config)
    server.app.config['TESTING'] = True
    with server.app.test_client() as c:
        yield c
    server.polar_service = None


class TestServiceNotInitialised:
    def test_returns_500(self):
        server.polar_service = None
        with server.app.test_client() as c:
            response = c.get('/api/bounds')

        assert response.status_code == 500


class TestBoundsAndAvailable:
    """Bounds and grid value endpoints."""

    def test_bounds(self, client):
        body = client.get('/api/bounds').get_json()

        assert body['control_file_loaded'] is True
        assert body['vessel'] == {'imo': '9876543', 'name': 'OCEAN STAR TRADER'}
        assert body['bounds']['gm'] == [1.0, 2.0]
        assert body['bounds']['tz'] == [5.0, 18.0]

    def test_bounds_without_control_file(self, polar_config, data_root):
        (data_root / 'proll.ctl').unlink()
        server.init_service(polar_config)
        try:
            with server.app.test_client() as c:
                body = c.get('/api/bounds').get_json()
        finally:
            server.polar_service = None

        assert body['control_file_loaded'] is False
        assert body['vessel'] is None
        assert body['bounds']['gm'] == [0.5, 5.0]

    def test_available(self, client):
        body = client.get('/api/available').get_json()

        assert body['gm'] == [1.0, 1.5, 2.0]
        assert body['drafts'] == ['scantling', 'design', 'intermediate']
        assert len(body['hs']) == 19


class TestFit:
    """GET /api/fit"""

    def test_fit(self, client):
        body = client.get('/api/fit?gm=1.73&hs=5.6&tz=7.4').get_json()

        assert body['draft'] == 'scantling'
        assert (body['gm'], body['hs'], body['tz']) == (1.5, 5.5, 7.5)
        assert body['storage_key'] == 'scantling/GM=1.5m/bin/MAXROLL_H5.5_T7.5.bpolar'
        assert body['image_key'] == 'scantling/GM=1.5m/plots/POLAR_ROLL_H5.5_T7.5_polarplot.gif'

    def test_fit_with_peak_drafts(self, client):
        body = client.get('/api/fit?draft=scantling&aft=5.0&fore=5.0').get_json()

        assert body['draft'] == 'intermediate'

    @pytest.mark.parametrize('query', [
        'gm=abc',
        'draft=ballast',
        'aft=x&fore=1',
        'gm=nan',
        'hs=inf',
        'tz=-inf',
        'aft=nan&fore=8',
    ])
    def test_bad_parameters(self, client, query):
        response = client.get(f'/api/fit?{query}')

        assert response.status_code == 400
        assert 'error' in response.get_json()

    @pytest.mark.parametrize('path', ['/api/polar', '/api/polar/dense', '/api/image'])
    def test_non_finite_rejected_on_every_endpoint(self, client, path):
        response = client.get(f'{path}?gm=nan&hs=5.5&tz=7.5')

        assert response.status_code == 400


class TestPolar:
    """GET /api/polar"""

    def test_polar(self, client):
        response = client.get('/api/polar?gm=1.5&hs=5.5&tz=7.5')
        body = response.get_json()

        assert response.status_code == 200
        assert body['angles'] == [0.0, 90.0, 180.0, 270.0]
        assert body['radii'] == [0.0, 5.0, 10.0, 15.0]
        assert body['matrix'][3][3] == 28.0
        assert body['peak']['max_roll'] == 28.0
        assert body['key']['storage_key'] == 'scantling/GM=1.5m/bin/MAXROLL_H5.5_T7.5.bpolar'

    def test_not_found(self, client):
        response = client.get('/api/polar?gm=2.0&hs=5.5&tz=7.5')

        assert response.status_code == 404
        assert response.get_json()['storage_key'] == 'scantling/GM=2.0m/bin/MAXROLL_H5.5_T7.5.bpolar'

    def test_corrupt(self, client):
        response = client.get('/api/polar?draft=design&gm=1.0&hs=3.0&tz=5.0')

        assert response.status_code == 422
        assert 'Error loading polar data' in response.get_json()['error']


class TestPolarDense:
    """GET /api/polar/dense"""

    def test_dense(self, client):
        body = client.get('/api/polar/dense?gm=1.5&hs=5.5&tz=7.5&angles=36&density=2').get_json()

        assert len(body['angles']) == 36
        assert len(body['radii']) == 8
        assert len(body['values']) == 8
        assert len(body['values'][0]) == 36
        assert body['max_roll'] <= 28.0
        assert body['key']['hs'] == 5.5

    def test_config_defaults(self, client):
        body = client.get('/api/polar/dense?gm=1.5&hs=5.5&tz=7.5').get_json()

        assert len(body['angles']) == 360
        assert len(body['radii']) == 12

    def test_weighted_flag(self, client):
        base = '/api/polar/dense?gm=1.5&hs=5.5&tz=7.5&angles=36&density=1'
        plain = client.get(base).get_json()
        weighted = client.get(base + '&weighted=1').get_json()

        assert plain['values'] != weighted['values']

    @pytest.mark.parametrize('query', ['angles=0', 'angles=4000', 'density=0', 'density=x'])
    def test_bad_grid_parameters(self, client, query):
        response = client.get(f'/api/polar/dense?gm=1.5&hs=5.5&tz=7.5&{query}')

        assert response.status_code == 400

    def test_not_found(self, client):
        response = client.get('/api/polar/dense?gm=2.0&hs=5.5&tz=7.5')

        assert response.status_code == 404


class TestImage:
    """GET /api/image"""

    def test_image(self, client):
        response = client.get('/api/image?gm=1.5&hs=5.5&tz=7.5')

        assert response.status_code == 200
        assert response.mimetype == 'image/gif'
        assert response.data.startswith(b'GIF89a')
        response.close()

    def test_missing_image(self, client):
        response = client.get('/api/image?gm=1.0&hs=5.5&tz=7.5')

        assert response.status_code == 404
        assert response.get_json()['image_key'] == \
            'scantling/GM=1.0m/plots/POLAR_ROLL_H5.5_T7.5_polarplot.gif'
