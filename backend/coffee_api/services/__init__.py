# Services package init
"""
Coffee API - Services Layer
============================

Service Inventory:
    - CoffeeService: presence/existence checks and SQLAlchemy reads/writes
      for coffees and coffee drinks
    - ParameterResolver: AWS SSM Parameter Store lookups used at startup
"""
