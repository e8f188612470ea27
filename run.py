import os

from pbreader import config

config.load_env()
config.configure_logging()

from pbreader.web import create_app

app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("FLASK_PORT", "5050"))
    debug = os.environ.get("FLASK_DEBUG", "1").strip() not in {
        "0",
        "false",
        "False",
    }
    print(f"   📡 Starting Flask development server on http://localhost:{port}")
    app.run(debug=debug, host="0.0.0.0", port=port, use_reloader=debug)
