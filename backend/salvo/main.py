from flask import Blueprint, current_app, jsonify

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Salvo game server!'})

@main.route('/health')
def health():
    service = current_app.extensions['salvo']
    return jsonify({'status': 'ok', 'rooms': len(service.registry)})
