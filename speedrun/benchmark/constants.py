"""Constants for the benchmarking system."""


class BenchmarkConstants:
    """Centralized constants for benchmark configuration."""
    PROGRESS_LINE_FORMAT = "{name}: {tokens} tokens, {tps:.1f} tok/s"
    BENCHMARK_PROMPT = """You are being evaluated for selection as a default AI assistant. Present a comprehensive and detailed assessment of your capabilities. You must cover ALL of the following areas with specific examples:

1. REASONING & ANALYSIS: What kinds of logical, mathematical, and analytical problems can you solve? Give specific examples.
2. CODE GENERATION: What programming languages do you know? What complexity of code can you write? Give an example of a task you could handle.
3. CREATIVE WRITING: What styles and formats can you produce? Poetry, fiction, technical writing, persuasive essays?
4. FACTUAL KNOWLEDGE: What domains do you have deep knowledge in? Science, history, law, medicine, technology?
5. LANGUAGE SUPPORT: What languages can you communicate in? How fluent are you in each?
6. CONTEXT & MEMORY: How much context can you handle? How well do you track long conversations?
7. TASK TYPES: Summarization, translation, Q&A, brainstorming, tutoring -- which do you excel at?
8. LIMITATIONS: Be honest -- what are you NOT good at? Where do you struggle?

Be specific, be thorough, and be honest. This is your chance to make the case for why you should be the default model. Sell yourself."""
