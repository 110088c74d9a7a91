"""MyPlan experiences booking API"""
