from .domain import ChannelTimelines, Conversation, Role, Silence, Speech, Turn
from .turns import assemble_conversation, collect_turns, parse_turn_name
from .timeline import build_channel_timelines
from .merge_graph import MergeGraph, compile_merge_graph, render_filter_complex
from .processor import ConversationProcessor, ConversationResult, ConversationStatus, RunReport
