"""
Todo service package.

A minimal CRUD HTTP service for todo items. Build an application with
todo_api.main.create_app, or run the server with `python -m todo_api`.
"""
