"""
SRMT Admin — административный бэкенд платформы SRMT
"""
