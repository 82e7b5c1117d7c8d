"""
Central Signal Registry for display synchronization events.

Uses blinker (Flask's signalling backend) so that observers such as the HTTP
layer or metrics hooks can follow the engine without the engine knowing them.

Usage:
    # Publisher (sender)
    from quizsync_app.core.signals import display_text_changed
    display_text_changed.send(session, text=text, index=index, state=state)

    # Subscriber
    @display_text_changed.connect
    def on_display_text_changed(sender, **kwargs):
        ...
"""
from blinker import Namespace

display_signals = Namespace()

# Signal: Fired when a navigation request starts and the ledger is bumped
# Payload: target_index, generation, timestamp
navigation_started = display_signals.signal('navigation_started')

# Signal: Fired when navigation to the active index completes
# Payload: target_index, generation, timestamp
navigation_completed = display_signals.signal('navigation_completed')

# Signal: Fired when an explanation result is dropped by the channel
# Payload: index, token, reason ('stale', 'mismatch', 'empty')
explanation_discarded = display_signals.signal('explanation_discarded')

# Signal: Fired when the coalesced display text changes
# Payload: text, index, state
display_text_changed = display_signals.signal('display_text_changed')

# Signal: Fired when question/option content availability flips
# Payload: available, index
content_availability_changed = display_signals.signal('content_availability_changed')
