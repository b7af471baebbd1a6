"""
Staff identity at the API boundary.

Tokens are issued elsewhere; this module only verifies them and turns their
claims into an Actor that is passed explicitly into every service call.
"""
