"""TourneyHub: tournament registration with wallet-funded prize pools"""

__version__ = "0.1.0"
