# run.py
import os
from app import create_app

config_name = os.getenv('FLASK_ENV') or 'default'
app = create_app(config_name)


# --- Flask CLI Commands ---
@app.shell_context_processor
def make_shell_context():
    """Makes variables available in the 'flask shell' context."""
    from bson import ObjectId
    return {'storage': app.extensions['storage'], 'ObjectId': ObjectId, 'app': app}


if __name__ == '__main__':
    # Use app.run() for development only. Use Gunicorn/WSGI for production.
    app.run(host='0.0.0.0', port=app.config['PORT'],
            debug=app.config.get('DEBUG', False),
            use_reloader=app.config.get('DEBUG', False))
