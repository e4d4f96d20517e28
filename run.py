#!/usr/bin/env python
"""
Local AssetDesk server.

    python run.py            # http://localhost:5000/api/v1
    flask --app run seed-demo

Production runs under gunicorn (see gunicorn.conf.py).
"""
import os
from dotenv import load_dotenv

load_dotenv()

from assetdesk import create_app  # noqa: E402

app = create_app(os.environ.get('FLASK_ENV', 'development'))

if __name__ == '__main__':
    port = int(os.environ.get('FLASK_PORT', 5000))
    app.logger.info('AssetDesk API listening on port %s', port)
    app.run(
        host=os.environ.get('FLASK_HOST', '127.0.0.1'),
        port=port,
        debug=os.environ.get('FLASK_DEBUG', 'false').lower() == 'true',
    )
