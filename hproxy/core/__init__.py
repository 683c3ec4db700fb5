"""
Core building blocks shared by every hproxy component: exceptions and enums.
"""
