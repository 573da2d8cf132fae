"""
DevConnect Backend - API Routes Package
=========================================

Route Inventory:
    - auth.py:      POST /auth/signup, /auth/login, /auth/logout
    - profile.py:   GET /profile/view, PATCH /profile/update,
                    POST /profile/reset-password
    - requests.py:  POST /requests/send/{status}/{toUserId},
                    POST /requests/review/{status}/{toUserId}
    - users.py:     GET /user/feed, /user/requests/received,
                    /user/requests/connections, /user?emailId=, /user/{userId}
    - health.py:    GET /health

Routes stay thin: pull inputs off the request, call a service, wrap the result
in a response schema.
"""
