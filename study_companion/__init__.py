from .config import load_config
from .extensions import init_extensions
from .logging_config import configure_logging


def create_app():
    """App factory entrypoint.

    Runtime clients live in ``study_companion.server``; the factory only
    makes sure config and logging are in place before it is imported.
    """
    config = load_config()
    configure_logging(config.log_level)

    from .server import app

    init_extensions(app)
    return app
