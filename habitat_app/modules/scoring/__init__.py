"""Scoring module: answer matching, aggregation, rewards and the completion gate.

Pure engine; persistence lives in the gamification module.
"""
