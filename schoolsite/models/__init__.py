"""
Models Package

Exports all models for easy importing.
"""

from schoolsite.models.user import User
from schoolsite.models.setting import Setting
from schoolsite.models.carousel import CarouselImage
from schoolsite.models.session import SessionRecord

__all__ = ['User', 'Setting', 'CarouselImage', 'SessionRecord']
