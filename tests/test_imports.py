def test_import_roguedex_package() -> None:
    import importlib

    module = importlib.import_module("roguedex")
    assert module.__version__


def test_import_services_has_no_side_effects() -> None:
    from roguedex.services import create_engine

    engine = create_engine()
    assert engine.rules.max_level == 4
