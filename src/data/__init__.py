"""Engine configuration, constants and state storage.

Import submodules directly (``src.data.params_factory``); this package is
imported by the engine's lowest layers, so it must not import them back.
"""
