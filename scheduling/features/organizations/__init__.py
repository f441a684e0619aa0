"""
Organizations feature package.

Finalizes paid organization onboardings: provisions the subdomain,
creates the organization with its owner, invites members and moves
or creates sub-teams.
"""
