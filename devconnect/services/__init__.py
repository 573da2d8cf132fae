"""
DevConnect Backend - Services Layer
=====================================

Business logic between the routes (HTTP) and the models (persistence).

Service Inventory:
    - UserService:        signup/login, profile updates, user queries and feed
    - ConnectionService:  connection-request workflow and its query views
"""
