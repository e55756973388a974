# Routes package init
"""
RecipePlanner Backend - API Routes Package
===========================================

What:  HTTP route handlers that accept requests and return responses.

Route Inventory:
    - auth.py:           /api/auth/register, /api/auth/login, /api/auth/profile
    - recipes.py:        /api/recipes/save-recipe, /my-recipes[/{id}],
                         /search/{ingredients}, /{id}
    - meal_plans.py:     /api/meal-plans, /add, /delete/{id}
    - shopping_list.py:  /api/shopping-list
    - health.py:         /health

Routes are THIN: they read the request, call a service with the caller's id
from the access guard, and shape the response. Ownership rules live in the
services, never here.
"""
