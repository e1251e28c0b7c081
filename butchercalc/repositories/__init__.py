"""
Entity repositories. Every function takes the Database handle as its first
argument, accepts and returns plain dicts and raises CostingError subclasses.
"""
