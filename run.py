"""Application entry point for the PayPortal credential security service"""
import os

from payportal import create_app

app = create_app(os.environ.get('PAYPORTAL_CONFIG', 'default'))

if __name__ == "__main__":
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000)
