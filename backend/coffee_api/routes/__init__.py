# Routes package init
"""
Coffee API - Routes Package
============================

Route Inventory:
    - coffee.py:  GET  /coffee/list
                  GET  /coffee/drinks/list
                  POST /coffee
                  POST /coffee/drinks
    - health.py:  GET  /health

Routes are thin: they extract the body, call CoffeeService and shape the
response envelope. Validation and data access live in the service.
"""
