from nicegui import ui
import logging

logger = logging.getLogger(__name__)


def nav(current: str = ''):
    with ui.element('div').classes('navbar'):
        def nav_link(label, path):
            link = (
                ui.link(label, path)
                .classes('flex items-center justify-center q-px-md text-white')
                .style('padding-left: 5px; padding-right: 5px;margin-left: 0;')
            )
            if label == current:
                link.style('color: #43e97b;')
            return link

        with ui.element('div').classes('nav-left'):
            ui.label('Pattern Charts').classes('text-h6 text-white')
        with ui.element('div').classes('nav-right'):
            nav_link('Analysis', '/analysis')


def footer():
    with ui.element('footer').classes('footer'):
        ui.html('<div><strong>Pattern Charts</strong> © 2025</div>')
        ui.html('<div>Data: analytics service</div>')
