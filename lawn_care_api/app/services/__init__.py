"""
Service layer abstraction.

Each service encapsulates the business logic for one domain (users,
grass species, plans).  API handlers only translate HTTP requests into
service calls.
"""
