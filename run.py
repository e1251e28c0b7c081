import atexit
import sys

from butchercalc import create_app
from butchercalc.config import load_config
from butchercalc.errors import MigrationError

if __name__ == "__main__":
    config = load_config()
    try:
        app = create_app()
    except MigrationError as e:
        print(f"Database migration failed for {config['DATABASE_PATH']}: {e}", file=sys.stderr)
        sys.exit(1)

    atexit.register(app.extensions['butchercalc.database'].close)

    # Local boundary only; the UI shell talks to it over loopback
    app.run(host=app.config['HOST'], port=app.config['PORT'])
