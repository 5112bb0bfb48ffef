import threading
from typing import Any, Callable, Iterator, Optional

from langgraph.graph import StateGraph, START, END
from pydantic import ValidationError

from playgen.config import config
from playgen.generation.chains import GameAgentChain
from playgen.generation.critic import Critic, build_revision_instructions
from playgen.generation.edit_tools import EditResult, apply_tool_edits
from playgen.generation.game_state import GameState
from playgen.generation.gateway import ModelGateway, ModelResponse, default_gateway
from playgen.generation.models import (
    Complete,
    CompleteData,
    ConfigDraft,
    ConfigDraftData,
    ConfigParseError,
    CriticResult,
    CriticResultData,
    CriticScored,
    ErrorData,
    GameSpec,
    GenerateGameInput,
    PipelineAborted,
    PipelineFailed,
    RendererKind,
    RevisionData,
    RevisionStarted,
    RoundSpec,
    SpecReady,
    SpecReadyData,
    ValidationErrorData,
    ValidationFailed,
    is_terminal,
)
from playgen.generation.trace import PipelineTrace
from playgen.rag_service.rag import lookup_references
from playgen.testing.runner import strip_code_fences, validate_custom_source
from playgen.validation.renderer_schemas import CustomGameConfig, renderer_config_adapter
from playgen.validation.validators import validate_config

RECURSION_LIMIT = 50
PLAIN_REWRITE_MIN_CHARS = 50


def renderer_config(spec: GameSpec, candidate: Any) -> dict:
    """Wire form of the renderer config for a structurally valid candidate."""
    if spec.is_custom:
        return CustomGameConfig(rounds=list(spec.rounds), source=candidate).to_wire()
    return renderer_config_adapter.validate_python(
        {"type": spec.game_type.value, "rounds": candidate}
    ).to_wire()


def apply_model_edits(source: str, response: ModelResponse) -> EditResult:
    """Apply a tool-enabled reply; plain text long enough to be code counts as a full rewrite."""
    if response.tool_calls:
        return apply_tool_edits(source, response.tool_calls)
    text = strip_code_fences(response.content or "")
    if len(text) > PLAIN_REWRITE_MIN_CHARS:
        return EditResult(code=text, applied_count=1, was_full_rewrite=True)
    return EditResult(code=source)


def _failure_guard(name: str, node_fn, trace: PipelineTrace, log_callback, describe_failure):
    """
    Wraps a graph node so an unexpected exception becomes one terminal error event.
    The best structurally valid candidate, if any, rides along as the fallback.
    """
    def guarded(state: GameState):
        try:
            return node_fn(state)
        except Exception as e:
            message = describe_failure(state, e)
            log_callback(f"[Error] {name}: {message}")
            trace.add_step("error", state.get("iteration"), error=message)
            fallback = None
            spec = state.get("spec")
            if spec is not None and state.get("best_candidate") is not None:
                fallback = renderer_config(spec, state["best_candidate"])
            return {
                "failed": True,
                "events": [PipelineFailed(data=ErrorData(message=message, fallback=fallback))],
            }
    return guarded


def _iteration_failure(state: GameState, e: Exception) -> str:
    if isinstance(e, PipelineAborted):
        return str(e)
    return f"Iteration {state.get('iteration', 1)} failed: {e}"


def create_game_generator_graph(agents: GameAgentChain, critic: Critic, trace: PipelineTrace, log_callback):
    """
    Template path: design -> build -> validate -> critic -> (revise -> validate)* -> finish.
    Passes 'agents', 'trace' and 'log_callback' into the nodes via closure.
    """
    max_iterations = config.MAX_ITERATIONS

    # --- Node Definitions ---
    def design_node(state: GameState):
        request = state["request"]
        log_callback(f"[Design] Drafting game spec for {request.profile.name}...")
        query = request.topic or (request.article.title if request.article else request.profile.subject)
        references = lookup_references(query)
        if references:
            log_callback(f"[Design] Retrieved {len(references)} reference snippet(s).")

        complete = trace.start_step("spec_generation")
        spec, exchange = agents.design(request.profile, request.topic, request.article, references)
        if request.preferred_game_type and not spec.is_custom:
            spec = spec.model_copy(update={"game_type": request.preferred_game_type})
        complete(llm=exchange.to_trace(), parsed=spec)
        trace.flush()

        log_callback(f"[Design] Spec ready: '{spec.title}' ({spec.game_type.value}, {len(spec.rounds)} rounds)")
        return {
            "spec": spec,
            "references": references,
            "iteration": 1,
            "best_score": -1,
            "events": [SpecReady(data=SpecReadyData(
                title=spec.title, concept=spec.concept, game_type=spec.game_type.value
            ))],
        }

    def build_node(state: GameState):
        spec = state["spec"]
        log_callback(f"[Build] Generating {'component code' if spec.is_custom else 'config'}...")
        complete = trace.start_step("config_generation", 1)
        try:
            candidate, exchange = agents.build(spec)
        except ConfigParseError as e:
            complete(error=str(e))
            trace.flush()
            log_callback(f"[Build] Could not parse model output: {e}")
            return {"candidate": None, "build_errors": [f"Could not parse config: {e}"]}

        if spec.is_custom:
            candidate = strip_code_fences(candidate)
            complete(llm=exchange.to_trace(), parsed="(custom code)")
        else:
            complete(llm=exchange.to_trace(), parsed=candidate)
        trace.flush()
        return {"candidate": candidate, "build_errors": []}

    def validate_node(state: GameState):
        spec, iteration = state["spec"], state["iteration"]
        candidate = state.get("candidate")
        events = [ConfigDraft(data=ConfigDraftData(iteration=iteration))]

        errors = list(state.get("build_errors") or [])
        if not errors:
            if spec.is_custom:
                report = validate_custom_source(candidate or "")
                candidate, errors = report.source, report.errors
            else:
                errors = validate_config(spec.game_type, candidate).errors

        if errors:
            log_callback(f"[Validate] Iteration {iteration}: {len(errors)} structural error(s).")
            trace.add_step("validation", iteration, result={"valid": False, "errors": errors})
            trace.flush()
            events.append(ValidationFailed(data=ValidationErrorData(iteration=iteration, errors=errors)))
            subject = "code validation" if spec.is_custom else "schema validation"
            return {
                "candidate": candidate,
                "candidate_valid": False,
                "build_errors": [],
                "critique": CriticResult.structural_failure(errors, subject=subject),
                "events": events,
            }

        log_callback(f"[Validate] Iteration {iteration}: structure OK.")
        trace.add_step("validation", iteration, result={"valid": True})
        return {"candidate": candidate, "candidate_valid": True, "build_errors": [], "events": events}

    def critic_node(state: GameState):
        spec, iteration, candidate = state["spec"], state["iteration"], state["candidate"]
        log_callback(f"[Critic] Scoring iteration {iteration}...")
        complete = trace.start_step("critic", iteration)
        critique = critic.critique(spec, candidate, spec.is_custom)
        complete(llm=critic.last_exchange.to_trace() if critic.last_exchange else None, parsed=critique)
        trace.flush()

        log_callback(f"[Critic] Score {critique.total_score}/12 ({'pass' if critique.passed else 'fail'}).")
        update = {
            "critique": critique,
            "events": [CriticScored(data=CriticResultData(
                passed=critique.passed, score=critique.total_score, iteration=iteration
            ))],
        }
        if critique.total_score > state.get("best_score", -1):
            update["best_candidate"] = candidate
            update["best_score"] = critique.total_score
        return update

    def revise_node(state: GameState):
        spec, iteration = state["spec"], state["iteration"]
        critique = state["critique"]
        instructions = critique.revision_instructions or build_revision_instructions(critique)
        critique = critique.model_copy(update={"revision_instructions": instructions})
        events = [RevisionStarted(data=RevisionData(iteration=iteration, instructions=instructions))]
        log_callback(f"[Revise] Iteration {iteration} failed, revising...")

        complete = trace.start_step("revision", iteration)
        update = {"iteration": iteration + 1, "events": events, "build_errors": []}
        if spec.is_custom:
            current = state.get("candidate") or ""
            exchange = agents.revise_code(spec, current, critique)
            result = apply_model_edits(current, exchange.response)
            for err in result.errors:
                log_callback(f"[Revise] Edit skipped: {err}")
            complete(llm=exchange.to_trace(), result={
                "appliedCount": result.applied_count,
                "wasFullRewrite": result.was_full_rewrite,
                "errors": [str(err) for err in result.errors],
            })
            update["candidate"] = result.code
        else:
            try:
                revised, exchange = agents.revise_config(spec, state.get("candidate"), critique)
                complete(llm=exchange.to_trace(), parsed=revised)
                update["candidate"] = revised
            except ConfigParseError as e:
                complete(error=str(e))
                log_callback(f"[Revise] Could not parse revised config: {e}")
                update["build_errors"] = [f"Could not parse revised config: {e}"]
        trace.flush()
        return update

    def finish_node(state: GameState):
        spec = state["spec"]
        critique = state.get("critique")
        if state.get("candidate_valid") and critique is not None and critique.passed:
            best_effort, candidate = False, state["candidate"]
        elif state.get("best_candidate") is not None:
            best_effort, candidate = True, state["best_candidate"]
            log_callback(f"[Result] Iterations exhausted, returning best candidate (score {state['best_score']}).")
        else:
            message = "Failed to generate a valid game after all iterations"
            log_callback(f"[Result] {message}")
            trace.add_step("error", error=message)
            return {"events": [PipelineFailed(data=ErrorData(message=message))]}

        final_config = renderer_config(spec, candidate)
        trace.add_step("complete", final_config=final_config, result={"bestEffort": best_effort})
        if not best_effort:
            log_callback("[Result] Game passed validation and critique.")
        return {"events": [Complete(data=CompleteData(
            spec=spec,
            config=final_config,
            custom_code=candidate if spec.is_custom else None,
            best_effort=best_effort,
        ))]}

    # --- Edge Conditional Functions ---
    def after_step(next_node):
        def route(state: GameState):
            return "failed" if state.get("failed") else next_node
        return route

    def check_validation(state: GameState):
        if state.get("failed"):
            return "failed"
        if state.get("candidate_valid"):
            return "to_critic"
        return "revise" if state["iteration"] < max_iterations else "finish"

    def check_critique(state: GameState):
        if state.get("failed"):
            return "failed"
        if state["critique"].passed:
            return "finish"
        return "revise" if state["iteration"] < max_iterations else "finish"

    def spec_failure(state, e):
        return str(e) if isinstance(e, PipelineAborted) else f"Failed to generate game spec: {e}"

    # --- Assemble StateGraph ---
    workflow = StateGraph(GameState)

    workflow.add_node("Design", _failure_guard("Design", design_node, trace, log_callback, spec_failure))
    workflow.add_node("Build", _failure_guard("Build", build_node, trace, log_callback, _iteration_failure))
    workflow.add_node("Validate", _failure_guard("Validate", validate_node, trace, log_callback, _iteration_failure))
    workflow.add_node("Critic", _failure_guard("Critic", critic_node, trace, log_callback, _iteration_failure))
    workflow.add_node("Revise", _failure_guard("Revise", revise_node, trace, log_callback, _iteration_failure))
    workflow.add_node("Finish", _failure_guard("Finish", finish_node, trace, log_callback, _iteration_failure))

    workflow.add_edge(START, "Design")
    workflow.add_conditional_edges("Design", after_step("continue"), {"continue": "Build", "failed": END})
    workflow.add_conditional_edges("Build", after_step("continue"), {"continue": "Validate", "failed": END})

    # Validation -> Critic, or straight into the revision loop on structural failure
    workflow.add_conditional_edges("Validate", check_validation, {
        "to_critic": "Critic",
        "revise": "Revise",
        "finish": "Finish",
        "failed": END
    })
    workflow.add_conditional_edges("Critic", check_critique, {
        "finish": "Finish",
        "revise": "Revise",
        "failed": END
    })
    workflow.add_conditional_edges("Revise", after_step("continue"), {"continue": "Validate", "failed": END})
    workflow.add_edge("Finish", END)

    return workflow.compile()


def custom_game_spec(run_id: str, topic: Optional[str]) -> GameSpec:
    return GameSpec(
        id=f"custom-{run_id}",
        title="Custom Game",
        game_type=RendererKind.CUSTOM,
        concept=topic or "AI-designed game",
        pedagogical_goal="Adaptive learning",
        why_this_game="Custom game designed for this learner",
        difficulty=3,
        rounds=[RoundSpec(round_number=1, focus="custom", content_seed="hardcoded")],
    )


def create_custom_game_graph(agents: GameAgentChain, trace: PipelineTrace, log_callback):
    """
    Custom fast path: one merged design+build call, the sandbox gates, and at most one fix.
    custom_start -> custom_build -> custom_check -> (custom_fix -> custom_check)? -> custom_finish
    """

    def start_node(state: GameState):
        request = state["request"]
        log_callback(f"[Custom] Generating a custom game for {request.profile.name}...")
        return {
            "iteration": 1,
            "fix_attempted": False,
            "events": [SpecReady(data=SpecReadyData(
                title="Generating custom game...",
                concept=request.topic or "AI-designed game",
                game_type=RendererKind.CUSTOM.value,
            ))],
        }

    def build_node(state: GameState):
        request = state["request"]
        query = request.topic or (request.article.title if request.article else request.profile.subject)
        references = lookup_references(query)
        complete = trace.start_step("custom_build")
        exchange = agents.build_custom_game(request.profile, request.topic, request.article, references)
        code = strip_code_fences(exchange.response.content)
        complete(llm=exchange.to_trace(), parsed="(custom code)")
        trace.flush()
        return {
            "candidate": code,
            "references": references,
            "events": [ConfigDraft(data=ConfigDraftData(iteration=1))],
        }

    def check_node(state: GameState):
        report = validate_custom_source(state.get("candidate") or "")
        update = {"gate": report, "candidate": report.source}
        if report.passed:
            log_callback("[Custom] All sandbox gates passed.")
            trace.add_step("validation", 1, result={"valid": True})
            return update

        log_callback(f"[Custom] Failed at the {report.stage} gate: {'; '.join(report.errors)}")
        trace.add_step("validation", 1, result={"valid": False, "stage": report.stage, "errors": report.errors})
        trace.flush()
        update["events"] = [ValidationFailed(data=ValidationErrorData(iteration=1, errors=report.errors))]
        return update

    def fix_node(state: GameState):
        code = state["candidate"]
        report = state["gate"]
        log_callback("[Custom] Attempting one fix...")
        complete = trace.start_step("custom_fix")
        try:
            exchange = agents.fix_code(code, ". ".join(report.errors))
        except PipelineAborted:
            raise
        except Exception as e:
            complete(error=str(e))
            log_callback(f"[Custom] Fix attempt failed: {e}")
            return {"fix_attempted": True, "fix_applied": False}

        result = apply_model_edits(code, exchange.response)
        for err in result.errors:
            log_callback(f"[Custom] Edit skipped: {err}")
        complete(llm=exchange.to_trace(), result={
            "appliedCount": result.applied_count,
            "wasFullRewrite": result.was_full_rewrite,
            "errors": [str(err) for err in result.errors],
        })
        trace.flush()

        applied = result.applied_count > 0
        update = {"fix_attempted": True, "fix_applied": applied}
        if applied:
            update["candidate"] = result.code
        else:
            log_callback("[Custom] No edit was applied.")
        return update

    def finish_node(state: GameState):
        report = state["gate"]
        if not report.passed and report.stage != "render":
            message = f"Custom game has validation errors: {'; '.join(report.errors)}"
            log_callback(f"[Result] {message}")
            trace.add_step("error", error=message)
            return {"events": [PipelineFailed(data=ErrorData(message=message))]}

        best_effort = not report.passed
        if best_effort:
            log_callback("[Result] Render check still failing, emitting anyway for the error boundary.")
        spec = custom_game_spec(trace.run_id, state["request"].topic)
        code = state["candidate"]
        final_config = renderer_config(spec, code)
        trace.add_step("complete", final_config="(custom code)", result={"bestEffort": best_effort})
        return {"spec": spec, "events": [Complete(data=CompleteData(
            spec=spec,
            config=final_config,
            custom_code=code,
            best_effort=best_effort,
        ))]}

    def route_after_check(state: GameState):
        if state.get("failed"):
            return "failed"
        if state["gate"].passed or state.get("fix_attempted"):
            return "finish"
        return "fix"

    def route_after_fix(state: GameState):
        if state.get("failed"):
            return "failed"
        return "recheck" if state.get("fix_applied") else "finish"

    def build_failure(state, e):
        return str(e) if isinstance(e, PipelineAborted) else f"Failed to generate custom game: {e}"

    workflow = StateGraph(GameState)
    workflow.add_node("CustomStart", start_node)
    workflow.add_node("CustomBuild", _failure_guard("CustomBuild", build_node, trace, log_callback, build_failure))
    workflow.add_node("CustomCheck", _failure_guard("CustomCheck", check_node, trace, log_callback, build_failure))
    workflow.add_node("CustomFix", _failure_guard("CustomFix", fix_node, trace, log_callback, build_failure))
    workflow.add_node("CustomFinish", _failure_guard("CustomFinish", finish_node, trace, log_callback, build_failure))

    workflow.add_edge(START, "CustomStart")
    workflow.add_edge("CustomStart", "CustomBuild")
    workflow.add_conditional_edges("CustomBuild", lambda s: "failed" if s.get("failed") else "check", {
        "check": "CustomCheck",
        "failed": END
    })
    workflow.add_conditional_edges("CustomCheck", route_after_check, {
        "fix": "CustomFix",
        "finish": "CustomFinish",
        "failed": END
    })
    workflow.add_conditional_edges("CustomFix", route_after_fix, {
        "recheck": "CustomCheck",
        "finish": "CustomFinish",
        "failed": END
    })
    workflow.add_edge("CustomFinish", END)

    return workflow.compile()


def generate_game(
    request,
    gateway: Optional[ModelGateway] = None,
    abort: Optional[threading.Event] = None,
    log_callback: Callable[[str], None] = print,
) -> Iterator[Any]:
    """
    Run the whole pipeline, yielding PipelineEvents as they happen.
    Ends with exactly one Complete or PipelineFailed. Closing the iterator stops the graph.
    """
    if isinstance(request, dict):
        try:
            request = GenerateGameInput.model_validate(request)
        except ValidationError as e:
            yield PipelineFailed(data=ErrorData(message=f"Invalid request: {e.errors()[0]['msg']}"))
            return

    trace = PipelineTrace({
        "profileName": request.profile.name,
        "topic": request.topic,
        "forceCustom": request.force_custom,
    })
    stream = None
    try:
        if gateway is None:
            gateway = default_gateway(abort=abort)
        elif abort is not None:
            # per-run wrapper; the caller's gateway keeps its own abort flag
            gateway = ModelGateway(gateway.llm, abort=abort)
        agents = GameAgentChain(gateway)

        if request.force_custom:
            log_callback("--- Custom Game Pipeline ---")
            graph = create_custom_game_graph(agents, trace, log_callback)
        else:
            log_callback("--- Game Generation Pipeline ---")
            graph = create_game_generator_graph(agents, Critic(agents), trace, log_callback)

        stream = graph.stream(
            {"request": request, "events": []},
            {"recursion_limit": RECURSION_LIMIT},
            stream_mode="updates",
        )
        for chunk in stream:
            for update in chunk.values():
                for event in (update or {}).get("events", []):
                    if is_terminal(event):
                        trace.finalize("complete" if event.event == "complete" else "error")
                        yield event
                        return
                    yield event

        message = "Pipeline ended without a result"
        trace.add_step("error", error=message)
        trace.finalize("error")
        yield PipelineFailed(data=ErrorData(message=message))
    except Exception as e:
        log_callback(f"[Error] Pipeline crashed: {e}")
        trace.add_step("error", error=str(e))
        trace.finalize("error")
        yield PipelineFailed(data=ErrorData(message=str(e)))
    finally:
        if stream is not None:
            stream.close()
        if not trace.finalized:
            trace.add_step("error", error="Pipeline exited unexpectedly without finalizing")
            trace.finalize("error")
