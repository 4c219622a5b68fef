"""
Notebook Auto-Grader: Automated grading of notebook assignments

Scores student notebook submissions against teacher-authored test cases
and serves the results to the classroom front-end.
"""

__version__ = "0.1.0"
