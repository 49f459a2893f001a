#!/usr/bin/env python3
"""
FloralBot web server

Hands the client its storage and vision credentials from GET /config so they
never ship inside page scripts, and serves a small upload page that runs the
upload -> analyze -> render pipeline.

Usage:
    python3 server.py

The server will run on http://localhost:3000 (or $PORT)
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask, jsonify, render_template, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from capture import CameraSource
from credentials import load_from_env, presence_report
from errors import ConfigError, DeviceError
from pipeline import FloralPipeline

load_dotenv()

logger = logging.getLogger(__name__)

# Credentials are read once and then reused for every request
_credentials = None

app = Flask(__name__)
CORS(app)  # Enable CORS for all routes


def get_credentials():
    global _credentials
    if _credentials is None:
        _credentials = load_from_env()
    return _credentials


def request_timeout():
    value = os.environ.get('REQUEST_TIMEOUT')
    return float(value) if value else None


def build_pipeline(credentials):
    return FloralPipeline(credentials, timeout=request_timeout())


def make_camera():
    return CameraSource(camera_index=int(os.environ.get('CAMERA_INDEX', '0')))


def render_page(results='', config_error=None, status=200):
    return render_template('index.html', results=results, config_error=config_error), status


@app.route('/config')
def config():
    logger.info('Server config: %s', presence_report())
    try:
        credentials = load_from_env()
    except ConfigError as e:
        return jsonify({'error': e.message}), 500
    return jsonify(credentials.to_mapping())


@app.route('/test-env')
def test_env():
    report = presence_report()
    token = os.environ.get('SAS_TOKEN') or ''
    if token:
        report['SAS_TOKEN'] = f'Present ({len(token)} chars)'
    return jsonify({
        'envVars': report,
        'sasTokenInfo': {
            'startsWithQuestion': token.startswith('?') if token else None,
            'length': len(token) if token else None,
            'firstChar': token[0] if token else None,
            'hasSpaces': any(ch.isspace() for ch in token),
        },
    })


@app.route('/')
def index():
    config_error = None
    try:
        get_credentials()
    except ConfigError as e:
        config_error = e.message
    return render_page(config_error=config_error)


@app.route('/analyze', methods=['POST'])
def analyze():
    try:
        credentials = get_credentials()
    except ConfigError as e:
        return render_page(config_error=e.message, status=500)

    if 'image' not in request.files or request.files['image'].filename == '':
        return jsonify({'error': 'No image file provided'}), 400

    outcome = build_pipeline(credentials).run_file(request.files['image'])
    if outcome.ok:
        return render_page(outcome.html)
    status = 400 if outcome.stage == 'capture' else 502
    return render_page(outcome.html, status=status)


@app.route('/capture', methods=['POST'])
def capture():
    try:
        credentials = get_credentials()
    except ConfigError as e:
        return render_page(config_error=e.message, status=500)

    outcome = build_pipeline(credentials).run_camera(make_camera())
    if outcome.ok:
        return render_page(outcome.html)
    status = 503 if isinstance(outcome.error, DeviceError) else 502
    return render_page(outcome.html, status=status)


@app.errorhandler(Exception)
def handle_error(error):
    if isinstance(error, HTTPException):
        return error
    logger.exception('Server error: %s', error)
    return jsonify({'error': 'Internal server error'}), 500


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')
    port = int(os.environ.get('PORT', '3000'))
    print('🌸 FloralBot server')
    print(f'📡 Running on http://localhost:{port}')
    print('🔑 Environment loaded:')
    for key, status in presence_report().items():
        print(f'   {key}: {status}')
    print('⏹️  Press Ctrl+C to stop\n')
    app.run(host='0.0.0.0', port=port, debug=False)
