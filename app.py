"""
The Impulse Academy
Application Entry Point

This file serves as the entry point for the Flask application.
It uses the application factory pattern defined in the academy package.
"""

import logging

from academy import create_app

logging.basicConfig(level=logging.INFO, format='%(asctime)s %(levelname)s %(name)s: %(message)s')

# Create the Flask application using the factory
app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False)
