def init_extensions(app) -> None:
    """Register the API blueprints once per app."""
    if app is None:
        return
    from .blueprints import ALL_BLUEPRINTS

    for blueprint in ALL_BLUEPRINTS:
        if blueprint.name not in app.blueprints:
            app.register_blueprint(blueprint)
    app.extensions.setdefault('study_companion', {})
    app.extensions['study_companion']['blueprints_registered'] = True
