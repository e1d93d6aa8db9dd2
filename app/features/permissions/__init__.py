"""
Permission management feature module.

Holds the Permission and Role models, the permission catalog, the
authorization resolver and permission CRUD.
"""
