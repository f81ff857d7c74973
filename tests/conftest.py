pytest_plugins = 'rfcjar.pytest_plugin'
