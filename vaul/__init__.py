# Vaul: personal vault for terminal commands, categories and aliases
#
# Components:
#   schema.py  - Data model (Command, Category) and JSON mapping
#   errors.py  - Store error hierarchy
#   store.py   - JSON-file persistence layer (commands.json, categories.json)
#   events.py  - Update notification for UI/CLI listeners
#   emitter.py - Optional webhook sink for update events
#   watcher.py - Reloads the store when backing files change on disk
#   config.py  - YAML/env configuration
#   runner.py  - Runs a saved command in the host shell
#   window.py  - Main window reference shared with auxiliary services
#   cli.py     - `vaul` entry point

__version__ = "1.0.0"
