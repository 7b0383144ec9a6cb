"""
WSGI entry point for Gunicorn
"""
import os
from unischedule import create_app

app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get('PORT', 5000))
    app.run(host='0.0.0.0', port=port, debug=False)
