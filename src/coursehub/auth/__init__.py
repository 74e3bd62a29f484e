"""Authentication and authorization.

Learn: One authentication path — email/password → stateless session
JWT carrying (user_id, role). The guard module layers role and
ownership checks on top of the resolved identity.
"""
