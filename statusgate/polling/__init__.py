from .poll_loop import PollLoop as PollLoop
