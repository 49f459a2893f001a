"""
Renders a FlowerAnalysis to HTML.

The presenter only keeps the latest output: each render replaces what was
there before, so calling it twice never stacks results.
"""

import json
import os
import re

from jinja2 import Environment, FileSystemLoader, select_autoescape

NO_FLOWERS_MESSAGE = 'No specific flowers detected in the image.'
TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'templates')
COLOR_NAME = re.compile(r'[A-Za-z]+')


def title_case(label):
    """'tulip' -> 'Tulip', 'cut flowers' -> 'Cut Flowers'"""
    return ' '.join(word[:1].upper() + word[1:] for word in label.replace('_', ' ').split())


def format_confidence(value):
    return f'{float(value) * 100:.1f}%'


def swatch_color(name):
    """CSS color for a swatch, or None when the name is not a plain color word"""
    if isinstance(name, str) and COLOR_NAME.fullmatch(name):
        return name.lower()
    return None


def pretty_json(value):
    return json.dumps(value, indent=2, sort_keys=True, default=str)


def _environment():
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(['html']),
    )
    env.filters['title_case'] = title_case
    env.filters['confidence'] = format_confidence
    env.filters['pretty_json'] = pretty_json
    env.filters['swatch_color'] = swatch_color
    return env


class Presenter:
    def __init__(self, env=None):
        self.env = env or _environment()
        self.output = ''

    def render(self, analysis, image_ref=None, raw_vision=None, upload_info=None):
        template = self.env.get_template('results.html')
        self.output = template.render(
            analysis=analysis,
            image_url=getattr(image_ref, 'url', image_ref),
            no_flowers_message=NO_FLOWERS_MESSAGE,
            raw_vision=raw_vision,
            upload_info=upload_info,
        )
        return self.output

    def render_error(self, message):
        template = self.env.get_template('error.html')
        self.output = template.render(message=message)
        return self.output

    def clear(self):
        self.output = ''
