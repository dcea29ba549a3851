"""
Tests for the Evaluation Runner.
================================

Tests for:
- Ground truth: Dataset loading
- Pipeline: Import-string resolution
- Runner: End-to-end evaluation, failure handling, report output
"""

import json

import pytest


# ─────────────────────────────────────────────────────────────────────────────
# Ground Truth Tests
# ─────────────────────────────────────────────────────────────────────────────


class TestGroundTruth:
    """Tests for ground truth datasets."""

    def test_load_json(self, temp_dir, sample_ground_truth):
        from claimbench.evaluation.ground_truth import load_ground_truth

        path = temp_dir / "qa.json"
        path.write_text(json.dumps(sample_ground_truth), encoding="utf-8")

        pairs = list(load_ground_truth(path))

        assert pairs[0] == ("What is the capital of France?", "Paris is the capital of France.")
        assert len(pairs) == 2

    def test_load_wrapped_json(self, temp_dir, sample_ground_truth):
        from claimbench.evaluation.ground_truth import load_ground_truth

        path = temp_dir / "qa.json"
        path.write_text(json.dumps({"questions": sample_ground_truth}), encoding="utf-8")

        assert len(list(load_ground_truth(path))) == 2

    def test_load_jsonl(self, temp_dir):
        """Test JSONL with alternative key names."""
        from claimbench.evaluation.ground_truth import load_ground_truth

        path = temp_dir / "qa.jsonl"
        path.write_text(
            '{"query": "Q1", "ground_truth": "A1."}\n\n{"question": "Q2", "answer": "A2."}\n',
            encoding="utf-8",
        )

        assert list(load_ground_truth(path)) == [("Q1", "A1."), ("Q2", "A2.")]

    def test_load_yaml(self, temp_dir):
        from claimbench.evaluation.ground_truth import load_ground_truth

        path = temp_dir / "qa.yaml"
        path.write_text("- question: Q1\n  answer: A1.\n", encoding="utf-8")

        assert list(load_ground_truth(path)) == [("Q1", "A1.")]

    def test_restartable(self, temp_dir, sample_ground_truth):
        """Test the dataset can be iterated more than once."""
        from claimbench.evaluation.ground_truth import GroundTruthDataset

        path = temp_dir / "qa.json"
        path.write_text(json.dumps(sample_ground_truth), encoding="utf-8")
        dataset = GroundTruthDataset(path)

        assert list(dataset) == list(dataset)

    def test_missing_file(self, temp_dir):
        from claimbench.evaluation.ground_truth import load_ground_truth

        with pytest.raises(FileNotFoundError):
            load_ground_truth(temp_dir / "missing.json")

    def test_unsupported_format(self, temp_dir):
        from claimbench.evaluation.ground_truth import load_ground_truth

        path = temp_dir / "qa.csv"
        path.write_text("question,answer\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Unsupported"):
            load_ground_truth(path)

    def test_invalid_entry(self, temp_dir):
        from claimbench.evaluation.ground_truth import load_ground_truth

        path = temp_dir / "qa.json"
        path.write_text(json.dumps([{"question": "Q1"}]), encoding="utf-8")

        with pytest.raises(ValueError, match="entry 0"):
            list(load_ground_truth(path))


# ─────────────────────────────────────────────────────────────────────────────
# Pipeline Loading Tests
# ─────────────────────────────────────────────────────────────────────────────


PIPELINE_MODULE = '''
class EchoPipeline:
    async def generate(self, question):
        return question, []


def make_pipeline():
    return EchoPipeline()


pipeline = EchoPipeline()
not_a_pipeline = 42
'''


class TestLoadPipeline:
    """Tests for load_pipeline."""

    @pytest.fixture
    def pipeline_module(self, temp_dir, monkeypatch):
        (temp_dir / "fake_rag_pipeline.py").write_text(PIPELINE_MODULE, encoding="utf-8")
        monkeypatch.syspath_prepend(str(temp_dir))
        return "fake_rag_pipeline"

    @pytest.mark.parametrize("attribute", ["EchoPipeline", "make_pipeline", "pipeline"])
    def test_resolve(self, pipeline_module, attribute):
        """Test classes, factories and instances all resolve to a pipeline."""
        from claimbench.evaluation.pipeline import load_pipeline

        pipeline = load_pipeline(f"{pipeline_module}:{attribute}")

        assert callable(pipeline.generate)

    def test_malformed(self):
        from claimbench.evaluation.pipeline import load_pipeline

        with pytest.raises(ValueError, match="module:attribute"):
            load_pipeline("no_colon_here")

    def test_not_a_pipeline(self, pipeline_module):
        from claimbench.evaluation.pipeline import load_pipeline

        with pytest.raises(ValueError):
            load_pipeline(f"{pipeline_module}:not_a_pipeline")


# ─────────────────────────────────────────────────────────────────────────────
# Runner Tests
# ─────────────────────────────────────────────────────────────────────────────


PARIS_QUESTION = "What is the capital of France?"
PARIS_ANSWER = "Paris is the capital of France."


@pytest.fixture
def make_evaluator(fake_judge):
    """Build an Evaluator around the fake judge."""
    from claimbench.evaluation.runner import Evaluator

    def _make(isolate_failures: bool = False):
        return Evaluator(judge=fake_judge, isolate_failures=isolate_failures)

    return _make


class TestEvaluator:
    """Tests for the Evaluator orchestrator."""

    @pytest.mark.asyncio
    async def test_perfect_answer(self, make_evaluator, static_pipeline):
        """Test an answer identical to the ground truth and context scores perfectly."""
        from claimbench.evaluation.runner import EvaluationState

        pipeline = static_pipeline({PARIS_QUESTION: (PARIS_ANSWER, [PARIS_ANSWER])})
        evaluator = make_evaluator()

        report = await evaluator.evaluate(pipeline, [(PARIS_QUESTION, PARIS_ANSWER)])

        overall = report.average_overall_claim_report
        retrieval = report.average_retrieval_claim_report
        generation = report.average_generation_claim_report

        assert (overall.precision, overall.recall, overall.f1_score) == (1.0, 1.0, 1.0)
        assert (retrieval.claim_recall, retrieval.context_precision) == (1.0, 1.0)
        assert generation.faithfulness == 1.0
        assert generation.hallucination == 0.0
        assert report.num_questions == 1
        assert evaluator.state == EvaluationState.DONE

    @pytest.mark.asyncio
    async def test_unsupported_claim(self, make_evaluator, static_pipeline):
        """Test a claim backed by neither context nor truth is a hallucination."""
        answer = PARIS_ANSWER + " Paris has ten million cats."
        pipeline = static_pipeline({PARIS_QUESTION: (answer, [PARIS_ANSWER])})

        report = await make_evaluator().evaluate(pipeline, [(PARIS_QUESTION, PARIS_ANSWER)])

        generation = report.average_generation_claim_report
        assert generation.hallucination > 0
        assert generation.faithfulness < 1
        assert report.average_overall_claim_report.precision == 0.5
        assert report.average_overall_claim_report.recall == 1.0

    @pytest.mark.asyncio
    async def test_question_order_and_llm_report(
        self, make_evaluator, static_pipeline, fake_judge
    ):
        """Test questions run in dataset order and every question is scored once."""
        pipeline = static_pipeline(
            {
                "Q1": ("A. B.", ["A.", "B."]),
                "Q2": ("C.", ["C."]),
            }
        )
        progress = []

        report = await make_evaluator().evaluate(
            pipeline,
            [("Q1", "A. B."), ("Q2", "C.")],
            progress_callback=lambda i, q: progress.append((i, q)),
        )

        assert pipeline.questions == ["Q1", "Q2"]
        assert [q.question for q in report.question_reports] == ["Q1", "Q2"]
        assert progress == [(1, "Q1"), (2, "Q2")]
        assert fake_judge.score_calls == 2
        assert report.average_llm_report.groundedness == 4.0

    @pytest.mark.asyncio
    async def test_claims_extracted_once_per_text(
        self, make_evaluator, static_pipeline, fake_judge
    ):
        """Test each chunk and both answers are extracted exactly once."""
        pipeline = static_pipeline({"Q": ("Answer.", ["Chunk one.", "Chunk two."])})

        await make_evaluator().evaluate(pipeline, [("Q", "Truth.")])

        assert sorted(fake_judge.extraction_calls) == sorted(
            ["Chunk one.", "Chunk two.", "Truth.", "Answer."]
        )

    @pytest.mark.asyncio
    async def test_joined_context_passed_to_judge(self, static_pipeline):
        """Test the LLM evaluator receives chunks joined by newlines in order."""
        from claimbench.evaluation.runner import Evaluator
        from tests.conftest import FakeJudge

        class RecordingJudge(FakeJudge):
            async def score(self, question, context, generated, ground_truth):
                self.context = context
                return await super().score(question, context, generated, ground_truth)

        judge = RecordingJudge()
        pipeline = static_pipeline({"Q": ("A.", ["First.", "Second."])})

        await Evaluator(judge=judge, isolate_failures=False).evaluate(pipeline, [("Q", "A.")])

        assert judge.context == "First.\nSecond."

    @pytest.mark.asyncio
    async def test_string_contexts_accepted(self, make_evaluator):
        """Test pipelines may return plain strings as context."""

        class StringPipeline:
            async def generate(self, question):
                return PARIS_ANSWER, [PARIS_ANSWER]

        report = await make_evaluator().evaluate(
            StringPipeline(), [(PARIS_QUESTION, PARIS_ANSWER)]
        )

        assert report.average_retrieval_claim_report.claim_recall == 1.0

    @pytest.mark.asyncio
    async def test_empty_dataset(self, make_evaluator, static_pipeline):
        from claimbench.shared.exceptions import EmptyReportSet

        with pytest.raises(EmptyReportSet):
            await make_evaluator().evaluate(static_pipeline({}), [])

    @pytest.mark.asyncio
    async def test_pipeline_failure_aborts(self, make_evaluator, static_pipeline):
        """Test a failing pipeline aborts the run by default."""
        from claimbench.shared.exceptions import PipelineFailure

        pipeline = static_pipeline(
            {
                "Q1": (RuntimeError("index offline"), []),
                "Q2": ("A.", ["A."]),
            }
        )

        with pytest.raises(PipelineFailure) as exc_info:
            await make_evaluator().evaluate(pipeline, [("Q1", "A."), ("Q2", "A.")])

        assert exc_info.value.question == "Q1"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert pipeline.questions == ["Q1"]

    @pytest.mark.asyncio
    async def test_judge_failure_aborts(self, static_pipeline):
        from claimbench.evaluation.runner import Evaluator
        from claimbench.shared.exceptions import JudgeUnavailable
        from tests.conftest import FakeJudge

        class DownJudge(FakeJudge):
            async def judge_entailment(self, claim, claims):
                raise JudgeUnavailable("down", attempts=3)

        pipeline = static_pipeline({"Q": ("A.", ["A."])})

        with pytest.raises(JudgeUnavailable):
            await Evaluator(judge=DownJudge(), isolate_failures=False).evaluate(
                pipeline, [("Q", "A.")]
            )

    @pytest.mark.asyncio
    async def test_isolate_failures(self, make_evaluator, static_pipeline):
        """Test failing questions are recorded and skipped in isolation mode."""
        pipeline = static_pipeline(
            {
                "Q1": (RuntimeError("index offline"), []),
                "Q2": ("A.", ["A."]),
            }
        )

        report = await make_evaluator(isolate_failures=True).evaluate(
            pipeline, [("Q1", "A."), ("Q2", "A.")]
        )

        assert [q.question for q in report.question_reports] == ["Q2"]
        assert len(report.failed_questions) == 1
        assert report.failed_questions[0].question == "Q1"
        assert "index offline" in report.failed_questions[0].error

    @pytest.mark.asyncio
    async def test_isolate_failures_all_failed(self, make_evaluator, static_pipeline):
        from claimbench.shared.exceptions import EmptyReportSet

        pipeline = static_pipeline({"Q1": (RuntimeError("down"), [])})

        with pytest.raises(EmptyReportSet):
            await make_evaluator(isolate_failures=True).evaluate(pipeline, [("Q1", "A.")])

    @pytest.mark.asyncio
    async def test_evaluate_from_file(self, make_evaluator, static_pipeline, temp_dir):
        path = temp_dir / "qa.json"
        path.write_text(
            json.dumps([{"question": PARIS_QUESTION, "answer": PARIS_ANSWER}]),
            encoding="utf-8",
        )
        pipeline = static_pipeline({PARIS_QUESTION: (PARIS_ANSWER, [PARIS_ANSWER])})

        report = await make_evaluator().evaluate(pipeline, path)

        assert report.num_questions == 1


class TestFailurePropagation:
    """Tests for errors and cancellation that must end the run."""

    @pytest.mark.asyncio
    async def test_cancellation_aborts_run(self, static_pipeline):
        """Test cancelling a run raises CancelledError even in isolation mode."""
        import asyncio

        from claimbench.evaluation.runner import Evaluator
        from tests.conftest import FakeJudge

        class BlockingJudge(FakeJudge):
            def __init__(self):
                super().__init__()
                self.started = asyncio.Event()

            async def extract_claims(self, text):
                self.started.set()
                await asyncio.Event().wait()

        judge = BlockingJudge()
        pipeline = static_pipeline({"Q1": ("A.", ["A."]), "Q2": ("B.", ["B."])})
        evaluator = Evaluator(judge=judge, isolate_failures=True)

        task = asyncio.create_task(evaluator.evaluate(pipeline, [("Q1", "A."), ("Q2", "B.")]))
        await judge.started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert pipeline.questions == ["Q1"]

    @pytest.mark.asyncio
    async def test_unparseable_chunk_claims_abort_run(self, static_pipeline):
        """Test a chunk whose extraction is not a claim list aborts the whole run."""
        from claimbench.evaluation.runner import Evaluator
        from claimbench.shared.exceptions import ExtractionParseError
        from tests.conftest import FakeJudge

        class MalformedChunkJudge(FakeJudge):
            async def extract_claims(self, text):
                if text == "Broken chunk.":
                    return {"x": 1}
                return await super().extract_claims(text)

        pipeline = static_pipeline(
            {
                "Q1": ("A.", ["A.", "Broken chunk."]),
                "Q2": ("B.", ["B."]),
            }
        )

        with pytest.raises(ExtractionParseError):
            await Evaluator(judge=MalformedChunkJudge(), isolate_failures=False).evaluate(
                pipeline, [("Q1", "A."), ("Q2", "B.")]
            )

        assert pipeline.questions == ["Q1"]


class TestRunEvaluation:
    """Tests for the synchronous entry points."""

    def test_evaluate_sync_twice_closes_judge(self, static_pipeline):
        """Test the same evaluator runs twice and closes its judge after each run."""
        from claimbench.evaluation.runner import Evaluator
        from tests.conftest import FakeJudge

        class ClosingJudge(FakeJudge):
            closed = 0

            async def aclose(self):
                self.closed += 1

        judge = ClosingJudge()
        evaluator = Evaluator(judge=judge, isolate_failures=False)
        pipeline = static_pipeline({PARIS_QUESTION: (PARIS_ANSWER, [PARIS_ANSWER])})

        first = evaluator.evaluate_sync(pipeline, [(PARIS_QUESTION, PARIS_ANSWER)])
        second = evaluator.evaluate_sync(pipeline, [(PARIS_QUESTION, PARIS_ANSWER)])

        assert first == second
        assert judge.closed == 2

    def test_evaluate_sync(self, make_evaluator, static_pipeline):
        pipeline = static_pipeline({PARIS_QUESTION: (PARIS_ANSWER, [PARIS_ANSWER])})

        report = make_evaluator().evaluate_sync(pipeline, [(PARIS_QUESTION, PARIS_ANSWER)])

        assert report.average_overall_claim_report.f1_score == 1.0

    def test_run_evaluation_saves_report(self, fake_judge, static_pipeline, temp_dir):
        from claimbench.evaluation.runner import run_evaluation
        from claimbench.shared.utils import load_json

        pipeline = static_pipeline({PARIS_QUESTION: (PARIS_ANSWER, [PARIS_ANSWER])})
        output_path = temp_dir / "report.json"

        report = run_evaluation(
            pipeline,
            [(PARIS_QUESTION, PARIS_ANSWER)],
            output_path=output_path,
            judge=fake_judge,
        )

        assert output_path.exists()
        assert load_json(output_path)["average_generation_claim_report"]["faithfulness"] == 1.0
        assert report.num_questions == 1
