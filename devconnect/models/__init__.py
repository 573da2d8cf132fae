"""
DevConnect Backend - ORM Models
=================================

    - User:               identity store (accounts and profiles)
    - ConnectionRequest:  directed edge between two users with a status label

Both modules are imported by Database.create_all() and alembic/env.py so
that their tables register with Base.metadata.
"""
