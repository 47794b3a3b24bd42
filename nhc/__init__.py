"""
Nutrition Habit Challenge API.
"""
