# Services package init
"""
RecipePlanner Backend - Services Layer
=======================================

What:  Business logic between routes (HTTP) and the database.

Service Inventory:
    - PasswordHasher:       bcrypt hashing and verification
    - TokenCodec:           signs and verifies bearer tokens (PyJWT)
    - AuthService:          register, login, profile read/update/delete
    - OwnedResourceStore:   owner-filtered queries for user-owned tables
    - RecipeService, MealPlanService, ShoppingListService:
                            the three user-owned resources
    - RecipeSource (abstract) / SpoonacularService:
                            third-party recipe search, behind a CircuitBreaker

Services never see HTTP objects. They take an AsyncSession and the caller's
user id, flush but never commit, and raise RecipePlannerError subclasses.
"""
