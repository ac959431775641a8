"""HTML renderer materializing render trees with BeautifulSoup."""
import logging
from typing import Callable, Iterable, List, Optional

from bs4 import BeautifulSoup, Tag

from renderer.calendar_links import calendar_link
from renderer.nodes import EmptyState, EventCard, GroupNode, RenderTree

logger = logging.getLogger(__name__)

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Campus Events</title>
</head>
<body>
<main>
<section class="events">
<div class="events-container"></div>
</section>
<section class="recruitment">
<h2 class="section-heading">Recruitment</h2>
<div class="recruitment-group"></div>
</section>
</main>
</body>
</html>
"""

EVENTS_CONTAINER = 'events-container'
RECRUITMENT_CONTAINER = 'recruitment-group'

RenderHook = Callable[[Tag], None]


class RenderError(Exception):
    """Raised when the page document cannot host the rendered content."""


def request_entry_animation(card: Tag) -> None:
    """Mark a freshly rendered card for its entry animation."""
    classes = card.get('class', [])
    if isinstance(classes, str):
        classes = classes.split()
    if 'reveal' not in classes:
        card['class'] = classes + ['reveal']


class HtmlRenderer:
    """Renderer replacing the event sections of a page document."""

    def __init__(
        self,
        document: str = PAGE_TEMPLATE,
        platform: str = 'google',
        hooks: Optional[Iterable[RenderHook]] = None
    ):
        """
        Initialize the renderer.

        Args:
            document: HTML page containing the event containers
            platform: Calendar provider used for "Add to Calendar" links
            hooks: Callables run on every produced card after insertion
                (default: request_entry_animation)
        """
        self.document = document
        self.platform = platform
        self.hooks = list(hooks) if hooks is not None else [request_entry_animation]

    def render(self, tree: RenderTree) -> str:
        """
        Render the tree into the page document.

        Both containers are built off-tree first, then cleared and filled,
        so the output never mixes old and new content.

        Args:
            tree: Render tree of the current cycle

        Returns:
            The full HTML document

        Raises:
            RenderError: If a container is missing from the document
        """
        soup = BeautifulSoup(self.document, 'html.parser')
        events_container = soup.find(class_=EVENTS_CONTAINER)
        recruitment_container = soup.find(class_=RECRUITMENT_CONTAINER)
        if events_container is None or recruitment_container is None:
            raise RenderError("Page document is missing the event containers")

        cards: List[Tag] = []
        event_nodes: List[Tag] = []
        recruitment_nodes: List[Tag] = []

        if tree.is_empty:
            event_nodes.append(self._empty_state(soup, tree.empty_state, 'no-events'))
        else:
            for group in tree.groups:
                event_nodes.append(self._group(soup, group, cards))
            if tree.events_placeholder:
                event_nodes.append(
                    self._empty_state(soup, tree.events_placeholder, 'no-events')
                )
            for card in tree.recruitment:
                node = self._card(soup, card)
                cards.append(node)
                recruitment_nodes.append(node)
            if tree.recruitment_placeholder:
                recruitment_nodes.append(
                    self._placeholder(soup, tree.recruitment_placeholder)
                )

        events_container.clear()
        recruitment_container.clear()
        for node in event_nodes:
            events_container.append(node)
        for node in recruitment_nodes:
            recruitment_container.append(node)

        for card in cards:
            for hook in self.hooks:
                hook(card)

        logger.info(f"Rendered {len(cards)} cards")
        return str(soup)

    def _group(self, soup: BeautifulSoup, group: GroupNode, cards: List[Tag]) -> Tag:
        node = soup.new_tag('div', attrs={'class': 'date-group', 'data-key': group.key})
        if group.heading:
            heading = soup.new_tag('h2', attrs={'class': 'date-heading'})
            heading.string = group.heading
            node.append(heading)
        for card in group.cards:
            card_node = self._card(soup, card)
            cards.append(card_node)
            node.append(card_node)
        return node

    def _text(self, soup: BeautifulSoup, name: str, css_class: str, text: str) -> Tag:
        node = soup.new_tag(name, attrs={'class': css_class})
        node.string = text
        return node

    def _card(self, soup: BeautifulSoup, card: EventCard) -> Tag:
        node = soup.new_tag('div', attrs={'class': 'event-card'})

        top = soup.new_tag('div', attrs={'class': 'event-top'})
        top.append(self._text(soup, 'h3', 'event-name', card.name))
        if card.organizer:
            top.append(self._text(soup, 'p', 'event-club', card.organizer))
        if card.od_badge:
            top.append(
                self._text(soup, 'span', f"od-badge {card.od_badge.css_class}", card.od_badge.text)
            )
        if card.description:
            top.append(self._text(soup, 'p', 'event-description', card.description))
        if card.deadline_text:
            top.append(self._text(soup, 'p', 'event-deadline', card.deadline_text))

        bottom = soup.new_tag('div', attrs={'class': 'event-bottom'})
        meta = soup.new_tag('div', attrs={'class': 'event-meta'})
        if card.venue:
            meta.append(self._text(soup, 'span', 'event-venue', f"📍 {card.venue}"))
        if card.time_range:
            meta.append(self._text(soup, 'span', 'event-time', f"🕒 {card.time_range}"))

        actions = soup.new_tag('div', attrs={'class': 'event-actions'})
        if card.register_url:
            link = soup.new_tag(
                'a',
                attrs={
                    'href': card.register_url,
                    'class': 'register-btn',
                    'target': '_blank',
                    'rel': 'noopener noreferrer',
                },
            )
            link.string = "Register"
            actions.append(link)
        if card.calendar:
            href = calendar_link(card.calendar.event, self.platform)
            if href:
                button = soup.new_tag(
                    'a',
                    attrs={
                        'href': href,
                        'class': 'calendar-btn',
                        'target': '_blank',
                        'rel': 'noopener noreferrer',
                    },
                )
                button.string = card.calendar.label
                actions.append(button)

        bottom.append(meta)
        bottom.append(actions)
        node.append(top)
        node.append(bottom)
        return node

    def _empty_state(self, soup: BeautifulSoup, state: EmptyState, css_class: str) -> Tag:
        node = soup.new_tag(
            'div', attrs={'class': css_class, 'data-reason': state.reason.value}
        )
        node.append(self._text(soup, 'h2', 'empty-title', state.title))
        if state.message:
            node.append(self._text(soup, 'p', 'empty-message', state.message))
        return node

    def _placeholder(self, soup: BeautifulSoup, state: EmptyState) -> Tag:
        return self._text(soup, 'div', 'recruitment-empty-state', state.title)
