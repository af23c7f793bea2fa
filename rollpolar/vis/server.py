#!/usr/bin/env python3
"""
Roll Polar Data Server
======================

Flask server exposing roll polar datasets as JSON for chart front-ends.
Provides parameter bounds, grid fitting, raw response matrices and dense
interpolated grids. Rendering is left to the client.

Usage:
    python -m rollpolar.vis.server --data-root PolarData --port 8080
"""

import argparse
import logging
import math
from typing import Optional, Tuple

from flask import Flask, jsonify, request, send_file

from ..config import PolarConfig
from ..data.service import PolarService
from ..grid import naming
from ..grid.fitter import DraftCategory, FitParameters
from ..polar.chart import chart_data, dense_grid_dict, dense_grid_for

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Global service instance
polar_service: Optional[PolarService] = None


def init_service(config: PolarConfig) -> PolarService:
    """Create the global service and load the control file if present."""
    global polar_service

    polar_service = PolarService(config)
    if not polar_service.store.root.exists():
        logger.warning(f"Data root not found: {polar_service.store.root}")
    polar_service.load_control_file()
    return polar_service


def _float_arg(name: str, default: Optional[float] = None) -> Optional[float]:
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    value = float(raw)
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {raw!r}")
    return value


def _int_arg(name: str, default: int) -> int:
    raw = request.args.get(name)
    if raw is None or raw == '':
        return default
    return int(raw)


def _fit_params() -> FitParameters:
    """Build FitParameters from query args; raises ValueError on bad input."""
    defaults = FitParameters()
    draft = request.args.get('draft') or defaults.draft
    return FitParameters(
        draft=DraftCategory(draft),
        gm=_float_arg('gm', defaults.gm),
        hs=_float_arg('hs', defaults.hs),
        tz=_float_arg('tz', defaults.tz),
        draft_aft_peak=_float_arg('aft'),
        draft_fore_peak=_float_arg('fore'),
    )


def _key_dict(params: FitParameters) -> dict:
    key = polar_service.fit(params)
    return {
        'draft': key.draft_category.value,
        'gm': key.gm,
        'hs': key.hs,
        'tz': key.tz,
        'storage_key': naming.storage_key(key),
        'image_key': naming.image_key(key),
    }


def _no_service() -> Tuple:
    return jsonify({'error': 'Polar service not initialised'}), 500


@app.route('/api/bounds')
def get_bounds():
    """Parameter bounds and vessel identity."""
    if polar_service is None:
        return _no_service()

    bounds = polar_service.get_parameter_bounds()
    vessel = polar_service.vessel_info
    return jsonify({
        'control_file_loaded': polar_service.is_control_file_loaded,
        'vessel': {'imo': vessel.imo, 'name': vessel.name} if vessel else None,
        'bounds': {
            'gm': [bounds.gm_lower, bounds.gm_upper],
            'hs': [bounds.hs_lower, bounds.hs_upper],
            'tz': [bounds.tz_lower, bounds.tz_upper],
        },
    })


@app.route('/api/available')
def get_available():
    """Stored GM / Hs / Tz grid values."""
    if polar_service is None:
        return _no_service()

    return jsonify({
        'gm': polar_service.available_gm_values(),
        'hs': polar_service.available_hs_values(),
        'tz': polar_service.available_tz_values(),
        'drafts': [d.value for d in DraftCategory],
    })


@app.route('/api/fit')
def get_fit():
    """
    Fit query parameters onto the dataset grid.

    Query params:
        gm, hs, tz: Requested values
        draft: scantling | design | intermediate
        aft, fore: Peak drafts (m); override draft when both are positive
    """
    if polar_service is None:
        return _no_service()

    try:
        params = _fit_params()
    except ValueError as e:
        return jsonify({'error': f'Invalid parameters: {e}'}), 400

    return jsonify(_key_dict(params))


def _load(params: FitParameters):
    result = polar_service.load_polar(params)
    if result.success:
        return result, None

    body = {
        'error': result.error_message,
        'storage_key': result.storage_key,
    }
    status = 404 if result.not_found else 422
    return result, (jsonify(body), status)


@app.route('/api/polar')
def get_polar():
    """Raw response matrix as angles (headings), radii (speeds) and matrix."""
    if polar_service is None:
        return _no_service()

    try:
        params = _fit_params()
    except ValueError as e:
        return jsonify({'error': f'Invalid parameters: {e}'}), 400

    result, error = _load(params)
    if error:
        return error

    body = chart_data(result.data)
    body['key'] = _key_dict(params)
    return jsonify(body)


@app.route('/api/polar/dense')
def get_polar_dense():
    """
    Dense interpolated grid.

    Query params:
        angles: Dense angle count (default from config)
        density: Radial density factor (default from config)
        weighted: 1 to weight angular neighbours by distance
    """
    if polar_service is None:
        return _no_service()

    config = polar_service.config
    try:
        params = _fit_params()
        angle_count = _int_arg('angles', config.target_angle_count)
        density = _int_arg('density', config.radial_density_factor)
    except ValueError as e:
        return jsonify({'error': f'Invalid parameters: {e}'}), 400

    if angle_count < 1 or angle_count > 3600 or density < 1 or density > 50:
        return jsonify({'error': 'angles must be 1-3600 and density 1-50'}), 400

    weighted_arg = request.args.get('weighted')
    weighted = config.angle_weighted if weighted_arg is None else weighted_arg in ('1', 'true', 'yes')

    result, error = _load(params)
    if error:
        return error

    grid = dense_grid_for(result.data, angle_count, density, weighted)
    body = dense_grid_dict(grid)
    body['key'] = _key_dict(params)
    body['max_roll'] = float(grid.values.max())
    return jsonify(body)


@app.route('/api/image')
def get_image():
    """Companion polar plot image for the fitted dataset."""
    if polar_service is None:
        return _no_service()

    try:
        params = _fit_params()
    except ValueError as e:
        return jsonify({'error': f'Invalid parameters: {e}'}), 400

    key = polar_service.image_key_for(params)
    if key is None:
        return jsonify({'error': 'Image not found',
                        'image_key': naming.image_key(polar_service.fit(params))}), 404

    return send_file(polar_service.store.resolve(key), mimetype='image/gif')


def main():
    parser = argparse.ArgumentParser(description='Roll Polar Data Server')
    parser.add_argument('--data-root', '-d', default=None,
                        help='Directory containing the control file and datasets')
    parser.add_argument('--config', '-c',
                        help='JSON configuration file')
    parser.add_argument('--port', '-p', type=int, default=8080,
                        help='Port to run server on (default: 8080)')
    parser.add_argument('--host', default='127.0.0.1',
                        help='Host to bind to (default: 127.0.0.1)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose logging')
    parser.add_argument('--debug', action='store_true',
                        help='Enable Flask debug mode')

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    config = PolarConfig.from_json(args.config) if args.config else PolarConfig()
    if args.data_root:
        config.data_root = args.data_root

    init_service(config)

    logger.info(f"Serving {config.data_root} at http://{args.host}:{args.port}")
    app.run(host=args.host, port=args.port, debug=args.debug)


if __name__ == '__main__':
    main()
