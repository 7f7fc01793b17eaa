import signal


#============================================
class RunCancelled(RuntimeError):
	"""
	Raised when an interrupt was observed between network calls.
	"""


#============================================
class InterruptWatch:
	"""
	Record SIGINT instead of raising, so in-flight calls finish.
	"""

	def __init__(self):
		self.requested = False
		self._previous_handler = None
		self._installed = False

	#============================================
	def _handle(self, signum, frame) -> None:
		self.requested = True

	#============================================
	def install(self) -> None:
		"""
		Swap in the recording SIGINT handler.
		"""
		if self._installed:
			return
		self._previous_handler = signal.signal(signal.SIGINT, self._handle)
		self._installed = True

	#============================================
	def restore(self) -> None:
		"""
		Put back the SIGINT handler that was active before install().
		"""
		if not self._installed:
			return
		signal.signal(signal.SIGINT, self._previous_handler)
		self._installed = False

	#============================================
	def check(self, context: str) -> None:
		"""
		Raise RunCancelled when an interrupt has been seen.
		"""
		if self.requested:
			raise RunCancelled(f"interrupted before {context}")

	def __enter__(self):
		self.install()
		return self

	def __exit__(self, exc_type, exc_value, traceback):
		self.restore()
		return False
