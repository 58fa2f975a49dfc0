from .predictor import Predictor, format_prediction

__all__ = ['Predictor', 'format_prediction']
